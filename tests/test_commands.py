# tests/test_commands.py
import pytest

from varnish_admin import ConfigError
from varnish_admin.protocols.commands import (
    CommandSet,
    ProtocolVersion,
    parse_version,
    resolve_command_set,
    supported_versions_text,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3", ProtocolVersion.V3),
        ("4.1.10", ProtocolVersion.V4),
        ("5.2", ProtocolVersion.V5),
        (6, ProtocolVersion.V6),
        # 只取开头的数字部分
        ("4abc", ProtocolVersion.V4),
        ("6-rc1", ProtocolVersion.V6),
        ("5beta.2", ProtocolVersion.V5),
        # 空值或无法解析时回退到最低版本
        (None, ProtocolVersion.V3),
        ("", ProtocolVersion.V3),
        ("trunk", ProtocolVersion.V3),
    ],
)
def test_parse_version(raw, expected):
    assert parse_version(raw) is expected


@pytest.mark.parametrize("raw", ["7", "7.1", "2.1.5", "0", "7abc", "10-rc1"])
def test_parse_version_unsupported(raw):
    with pytest.raises(ConfigError) as exc_info:
        parse_version(raw)

    assert "3, 4, 5 and 6" in str(exc_info.value)


def test_supported_versions_text():
    assert supported_versions_text() == "3, 4, 5 and 6"


def test_every_version_has_a_command_set():
    for version in ProtocolVersion:
        assert isinstance(resolve_command_set(version), CommandSet)


def test_version_3_uses_ban_url():
    commands = resolve_command_set(ProtocolVersion.V3)
    assert commands.purge == "ban"
    assert commands.purge_url == "ban.url"


@pytest.mark.parametrize(
    "version", [ProtocolVersion.V4, ProtocolVersion.V5, ProtocolVersion.V6]
)
def test_version_4_and_later_use_req_url(version):
    commands = resolve_command_set(version)
    assert commands.purge == "ban"
    assert commands.purge_url == "ban req.url ~"


def test_version_5_and_6_share_the_same_table():
    assert resolve_command_set(ProtocolVersion.V5) == resolve_command_set(
        ProtocolVersion.V6
    )


def test_version_with_suffix_selects_req_url_command():
    """带后缀的 4.x 版本号不能被当成 3.x 而选错 ban.url"""
    commands = resolve_command_set(parse_version("4abc"))
    assert commands.purge_url == "ban req.url ~"


def test_command_set_is_immutable():
    commands = resolve_command_set(ProtocolVersion.V4)
    with pytest.raises(AttributeError):
        commands.purge = "purge"
