# src/varnish_admin/protocols/__init__.py
"""
Varnish CLI 协议层 (Protocol Layer)

- constants / commands / framing / auth: 纯粹的报文构建与解析，不持有状态。
- client: 在已打开的 Transport 上编排握手与命令执行。
"""

from . import constants
from .auth import build_auth_command, compute_auth_response, extract_challenge
from .client import AdminProtocol
from .commands import (
    CommandSet,
    ProtocolVersion,
    parse_version,
    resolve_command_set,
)
from .framing import Response, format_body, parse_status_line, read_response

# 公共 API
__all__ = [
    "constants",
    "AdminProtocol",
    "CommandSet",
    "ProtocolVersion",
    "parse_version",
    "resolve_command_set",
    "Response",
    "parse_status_line",
    "read_response",
    "format_body",
    "extract_challenge",
    "compute_auth_response",
    "build_auth_command",
]
