# src/varnish_admin/protocols/commands.py
"""
Varnish CLI 协议层 - 命令表 (Command Set)

不同主版本的 Varnish 使用的命令名称不同 (如 3.x 的 ban.url 在 4.x 后
被 "ban req.url ~" 取代)。本模块在构造客户端时一次性解析版本并选出命令表。
"""

import logging
import re
from dataclasses import dataclass
from enum import IntEnum

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)


class ProtocolVersion(IntEnum):
    """受支持的 Varnish 主版本号。"""

    V3 = 3
    V4 = 4
    V5 = 5
    V6 = 6


DEFAULT_VERSION = min(ProtocolVersion)

LEADING_DIGITS_PATTERN = re.compile(r"\d+")


@dataclass(frozen=True)
class CommandSet:
    """某一协议版本下的命令名称表。

    Attributes:
        auth: 认证命令。
        quit: 关闭会话命令。
        start: 启动子进程命令。
        stop: 停止子进程命令。
        status: 查询子进程状态命令。
        purge: 按表达式失效缓存的命令。
        purge_url: 按 URL 失效缓存的命令 (后面直接拼接 URL)。
    """

    auth: str
    quit: str
    start: str
    stop: str
    status: str
    purge: str
    purge_url: str


_COMMANDS_V3 = CommandSet(
    auth="auth",
    quit="quit",
    start="start",
    stop="stop",
    status="status",
    purge="ban",
    purge_url="ban.url",
)

_COMMANDS_V4 = CommandSet(
    auth="auth",
    quit="quit",
    start="start",
    stop="stop",
    status="status",
    purge="ban",
    purge_url="ban req.url ~",
)

# 5.x 与 4.x 的 CLI 命令保持一致；6.x 相对 5.x 没有变化
_COMMANDS_V5 = _COMMANDS_V4

_COMMAND_TABLE: dict[ProtocolVersion, CommandSet] = {
    ProtocolVersion.V3: _COMMANDS_V3,
    ProtocolVersion.V4: _COMMANDS_V4,
    ProtocolVersion.V5: _COMMANDS_V5,
    ProtocolVersion.V6: _COMMANDS_V5,
}


def supported_versions_text() -> str:
    """生成受支持版本的列表文本，如 "3, 4, 5 and 6"。"""
    versions = [str(v.value) for v in sorted(ProtocolVersion)]
    if len(versions) == 1:
        return versions[0]
    return f"{', '.join(versions[:-1])} and {versions[-1]}"


def parse_version(raw: str | int | None) -> ProtocolVersion:
    """将用户给定的版本字符串解析为 ProtocolVersion。

    只取第一个 '.' 之前的主版本号 ("4.1.10" -> 4)。
    主版本号取开头的数字部分 ("4abc" -> 4)；为空或不以数字开头时
    回退到最低的受支持版本。

    Args:
        raw: 版本字符串、整数或 None。

    Returns:
        ProtocolVersion: 解析后的主版本。

    Raises:
        ConfigError: 主版本号不在受支持的集合中。
    """
    text = "" if raw is None else str(raw).strip()
    major_text = text.split(".", 1)[0]

    # 只取开头的数字，忽略 "-rc1" 之类的后缀 ("6-rc1" -> 6)
    match = LEADING_DIGITS_PATTERN.match(major_text)
    if match:
        major = int(match.group(0))
    else:
        if major_text:
            logger.debug(f"无法解析版本号 '{text}'，使用默认版本 {DEFAULT_VERSION.value}")
        major = DEFAULT_VERSION.value

    try:
        return ProtocolVersion(major)
    except ValueError:
        raise ConfigError(
            f"不支持的 Varnish 版本 '{text}': "
            f"Only versions {supported_versions_text()} of Varnish are supported"
        ) from None


def resolve_command_set(version: ProtocolVersion) -> CommandSet:
    """根据协议版本选出命令表。

    Raises:
        ConfigError: 版本不在命令表中。
    """
    try:
        return _COMMAND_TABLE[version]
    except KeyError:
        raise ConfigError(f"未登记命令表的协议版本: {version}") from None
