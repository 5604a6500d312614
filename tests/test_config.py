# tests/test_config.py
from pathlib import Path

import pytest

from varnish_admin import ConfigError
from varnish_admin.config import (
    VarnishAdminConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
    read_secret_file,
)

ENV_KEYS = [
    "VARNISH_HOST",
    "VARNISH_PORT",
    "VARNISH_VERSION",
    "VARNISH_SECRET",
    "VARNISH_SECRET_FILE",
    "VARNISH_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """清理 VARNISH_ 环境变量，并切换到不含 .env 的临时目录"""
    for key in ENV_KEYS:
        # 先 setenv 再 delenv，保证 load_dotenv 写入的变量在测试结束后被撤销
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


# --- Factory 测试 ---


def test_defaults_from_empty_dict():
    config = create_config_from_dict({})

    assert config == VarnishAdminConfig()
    assert config.host == "127.0.0.1"
    assert config.port == 6082
    assert config.version == "3"
    assert config.secret is None
    assert config.timeout == 5.0


def test_create_config_converts_types():
    config = create_config_from_dict(
        {"host": "10.0.0.5", "port": "6083", "version": "6.0", "timeout": "2.5"}
    )

    assert config.host == "10.0.0.5"
    assert config.port == 6083
    assert config.version == "6.0"
    assert config.timeout == 2.5


def test_create_config_unsupported_version():
    with pytest.raises(ConfigError, match="3, 4, 5 and 6"):
        create_config_from_dict({"version": "7.1"})


@pytest.mark.parametrize("port", ["abc", 0, 70000])
def test_create_config_invalid_port(port):
    with pytest.raises(ConfigError, match="端口"):
        create_config_from_dict({"port": port})


def test_create_config_invalid_timeout():
    with pytest.raises(ConfigError, match="超时格式无效"):
        create_config_from_dict({"timeout": "soon"})


def test_create_config_non_positive_timeout_uses_default():
    assert create_config_from_dict({"timeout": 0}).timeout == 5.0


def test_create_config_empty_host_is_kept():
    assert create_config_from_dict({"host": ""}).host == ""


def test_secret_file_is_read_verbatim(tmp_path):
    secret_file = tmp_path / "secret"
    secret_file.write_bytes(b"s3cr3t\n")

    config = create_config_from_dict({"secret_file": str(secret_file)})

    assert config.secret == "s3cr3t\n"


def test_secret_takes_precedence_over_secret_file(tmp_path):
    config = create_config_from_dict(
        {"secret": "inline", "secret_file": str(tmp_path / "missing")}
    )
    assert config.secret == "inline"


def test_read_secret_file_missing(tmp_path):
    with pytest.raises(ConfigError, match="secret 文件未找到"):
        read_secret_file(tmp_path / "missing")


def test_repr_hides_secret():
    config = VarnishAdminConfig(secret="s3cr3t")

    assert "s3cr3t" not in repr(config)
    assert "******" in repr(config)


def test_config_is_frozen():
    config = VarnishAdminConfig()
    with pytest.raises(AttributeError):
        config.secret = "changed"


# --- Loader 测试 (I/O) ---


def test_load_toml_varnish_section(tmp_path):
    toml_content = """
    [varnish]
    host = "192.168.1.20"
    port = 6082
    version = "4.1"
    secret = "toml_secret"
    """
    f = tmp_path / "config.toml"
    f.write_text(toml_content, encoding="utf-8")

    config = load_config_from_toml(f)

    assert config.host == "192.168.1.20"
    assert config.version == "4.1"
    assert config.secret == "toml_secret"


def test_load_toml_instance_overrides_shared(tmp_path):
    """[varnish.<实例>] 继承 [varnish] 的共用设置，并覆盖同名字段"""
    secret_file = tmp_path / "secret"
    secret_file.write_bytes(b"shared_secret\n")
    toml_content = f"""
    [varnish]
    version = "6"
    port = 6082
    secret_file = "{secret_file.as_posix()}"

    [varnish.edge1]
    host = "10.0.0.11"

    [varnish.edge2]
    host = "10.0.0.12"
    port = 6083
    """
    f = tmp_path / "config.toml"
    f.write_text(toml_content, encoding="utf-8")

    edge1 = load_config_from_toml(f, instance="edge1")
    edge2 = load_config_from_toml(f, instance="edge2")

    assert (edge1.host, edge1.port, edge1.version) == ("10.0.0.11", 6082, "6")
    assert (edge2.host, edge2.port) == ("10.0.0.12", 6083)
    assert edge1.secret == edge2.secret == "shared_secret\n"


def test_load_toml_without_instance_ignores_subtables(tmp_path):
    toml_content = """
    [varnish]
    version = "5"

    [varnish.edge1]
    host = "10.0.0.11"
    """
    f = tmp_path / "config.toml"
    f.write_text(toml_content, encoding="utf-8")

    config = load_config_from_toml(f)

    assert config.host == "127.0.0.1"
    assert config.version == "5"


def test_load_toml_unknown_instance(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text('[varnish]\n[varnish.edge1]\nhost = "10.0.0.11"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="未找到实例.*edge1"):
        load_config_from_toml(f, instance="edge9")


def test_load_toml_missing_varnish_section(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text('host = "10.1.1.1"\nport = 6090\n', encoding="utf-8")

    with pytest.raises(ConfigError, match=r"缺少 \[varnish\] 节"):
        load_config_from_toml(f)


def test_load_toml_not_found():
    with pytest.raises(ConfigError, match="配置文件未找到"):
        load_config_from_toml(Path("non_existent.toml"))


def test_load_toml_invalid_syntax(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text("host = ", encoding="utf-8")

    with pytest.raises(ConfigError, match="读取 TOML 失败"):
        load_config_from_toml(f)


def test_load_env(clean_env):
    clean_env.setenv("VARNISH_HOST", "172.16.0.9")
    clean_env.setenv("VARNISH_PORT", "6083")
    clean_env.setenv("VARNISH_VERSION", "5")
    clean_env.setenv("VARNISH_SECRET", "env_secret")

    config = load_config_from_env()

    assert config.host == "172.16.0.9"
    assert config.port == 6083
    assert config.version == "5"
    assert config.secret == "env_secret"


def test_load_env_from_dotenv_file(clean_env, tmp_path):
    dotenv = tmp_path / "varnish.env"
    dotenv.write_text("VARNISH_HOST=10.9.9.9\nVARNISH_TIMEOUT=3\n", encoding="utf-8")

    config = load_config_from_env(dotenv_path=dotenv)

    assert config.host == "10.9.9.9"
    assert config.timeout == 3.0


def test_load_env_dotenv_does_not_override(clean_env, tmp_path):
    clean_env.setenv("VARNISH_HOST", "from-env")
    dotenv = tmp_path / "varnish.env"
    dotenv.write_text("VARNISH_HOST=from-file\n", encoding="utf-8")

    assert load_config_from_env(dotenv_path=dotenv).host == "from-env"


def test_load_env_missing_dotenv_file(clean_env, tmp_path):
    with pytest.raises(ConfigError, match=".env 文件未找到"):
        load_config_from_env(dotenv_path=tmp_path / "missing.env")


def test_load_env_nothing_set(clean_env):
    with pytest.raises(ConfigError, match="VARNISH_"):
        load_config_from_env()
