"""
Varnish 管理客户端 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (含 .env 文件) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError
from .protocols.commands import DEFAULT_VERSION, parse_version
from .protocols.constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VarnishAdminConfig:
    """VarnishAdmin 的强类型配置对象。

    所有字段均为只读 (frozen=True)，构造一次后传给客户端，运行期间不可修改。

    Attributes:
        host: varnishadm 监听地址。为空字符串时所有命令都是空操作。
        port: varnishadm 监听端口 (通常为 6082)。
        version: Varnish 版本字符串 (如 "4.1")，只取主版本号。
        secret: 认证密钥。仅当服务器发出认证质询时需要。
        timeout: 连接超时与单次读取超时 (秒)。
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    version: str = str(DEFAULT_VERSION.value)
    secret: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏 secret 字段，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"version={self.version}, "
            f"secret={'******' if self.secret else None}, "
            f"timeout={self.timeout}>"
        )


def read_secret_file(file_path: Path) -> str:
    """读取 secret 文件 (与 varnishadm -S 相同)。

    文件内容原样使用，包括结尾换行。

    Raises:
        ConfigError: 文件不存在或无法读取。
    """
    if not file_path.exists():
        raise ConfigError(f"secret 文件未找到: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as e:
        raise ConfigError(f"读取 secret 文件失败: {e}") from e


def create_config_from_dict(raw_data: dict[str, Any]) -> VarnishAdminConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。所有字段均为可选。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        VarnishAdminConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 字段格式错误、版本不受支持或 secret 文件无法读取。
    """
    try:

        def _get(key: str, default: Any) -> Any:
            """获取可选字段，缺失或为 None 时使用默认值"""
            val = raw_data.get(key)
            return default if val is None else val

        def _to_port(key: str) -> int:
            val = _get(key, DEFAULT_PORT)
            try:
                port = int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"端口格式无效 '{key}': {val}")
            if not 0 < port < 65536:
                raise ConfigError(f"端口超出范围 '{key}': {port}")
            return port

        def _to_timeout(key: str) -> float:
            val = _get(key, DEFAULT_TIMEOUT)
            try:
                timeout = float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"超时格式无效 '{key}': {val}")
            # 0 或负数视为未设置
            return timeout if timeout > 0 else DEFAULT_TIMEOUT

        def _secret() -> str | None:
            if raw_data.get("secret") is not None:
                return str(raw_data["secret"])
            if raw_data.get("secret_file"):
                return read_secret_file(Path(str(raw_data["secret_file"])))
            return None

        version = str(_get("version", DEFAULT_VERSION.value))
        # 尽早暴露不受支持的版本
        parse_version(version)

        return VarnishAdminConfig(
            host=str(_get("host", DEFAULT_HOST)),
            port=_to_port("port"),
            version=version,
            secret=_secret(),
            timeout=_to_timeout("timeout"),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(
    file_path: Path, instance: str | None = None
) -> VarnishAdminConfig:
    """从 TOML 文件加载配置。

    [varnish] 节存放所有实例共用的设置 (如 version、secret_file)，
    [varnish.<instance>] 子表存放单个缓存节点的设置，并覆盖共用值:

        [varnish]
        version = "6"
        secret_file = "/etc/varnish/secret"

        [varnish.edge1]
        host = "10.0.0.11"

    Args:
        file_path: TOML 文件路径。
        instance: 实例名。为 None 时只使用共用设置。

    Returns:
        VarnishAdminConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败、缺少 [varnish] 节或实例不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    section = data.get("varnish")
    if not isinstance(section, dict):
        raise ConfigError(f"配置文件缺少 [varnish] 节: {file_path}")

    # 非表格字段为共用设置，表格字段为实例
    shared = {k: v for k, v in section.items() if not isinstance(v, dict)}
    instances = {k: v for k, v in section.items() if isinstance(v, dict)}

    if instance is None:
        return create_config_from_dict(shared)

    if instance not in instances:
        known = ", ".join(sorted(instances)) or "无"
        raise ConfigError(f"未找到实例: [varnish.{instance}] (已定义: {known})")

    logger.debug(f"加载实例配置: [varnish.{instance}]")
    return create_config_from_dict({**shared, **instances[instance]})


def load_config_from_env(dotenv_path: Path | None = None) -> VarnishAdminConfig:
    """从环境变量加载配置 (Docker/Cloud Friendly)。

    如果给定了 dotenv_path (或当前目录存在 .env)，先将其载入环境变量，
    已存在的环境变量不会被覆盖。随后读取所有 `VARNISH_` 前缀的变量。
    例如: `VARNISH_HOST` -> `host`。

    Returns:
        VarnishAdminConfig: 配置对象。

    Raises:
        ConfigError: 指定的 .env 文件不存在，或未检测到任何相关环境变量。
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise ConfigError(f".env 文件未找到: {dotenv_path}")
        load_dotenv(dotenv_path=dotenv_path, override=False)
    elif (Path.cwd() / ".env").exists():
        load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # 字段映射表 (Config Field -> Env Suffix)
    env_map = {
        "host": "HOST",
        "port": "PORT",
        "version": "VERSION",
        "secret": "SECRET",
        "secret_file": "SECRET_FILE",
        "timeout": "TIMEOUT",
    }

    raw_data = {}

    for cfg_key, env_suffix in env_map.items():
        env_key = f"VARNISH_{env_suffix}"
        val = os.environ.get(env_key)
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 VARNISH_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
