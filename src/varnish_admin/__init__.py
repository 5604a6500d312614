# src/varnish_admin/__init__.py
"""
varnish-admin-core v1.0.0
Varnish Cache 管理控制台 (varnishadm) 协议客户端核心库。
"""

# 暴露核心配置
from .config import (
    VarnishAdminConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露客户端与状态
from .core import VarnishAdmin

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthenticationError,
    ConfigError,
    ProtocolError,
    ResponseCode,
    StateError,
    TransportError,
    VarnishAdminError,
)
from .protocols.commands import CommandSet, ProtocolVersion
from .state import AdminState, ChildState, ClientStatus

__version__ = "1.0.0"

__all__ = [
    "VarnishAdmin",
    "VarnishAdminConfig",
    "AdminState",
    "ClientStatus",
    "ChildState",
    "CommandSet",
    "ProtocolVersion",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "VarnishAdminError",
    "ConfigError",
    "TransportError",
    "ProtocolError",
    "AuthenticationError",
    "StateError",
    "ResponseCode",
]
