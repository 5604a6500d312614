# src/varnish_admin/protocols/constants.py
"""
Varnish CLI 协议层 - 常量定义

本模块定义了所有协议相关的状态码、分隔符和正则。
采用命名空间 (Class Namespace) 组织。
"""

import re

# =========================================================================
# 1. 状态码 (Status Codes)
# =========================================================================


class StatusCode:
    """协议交互中有特殊含义的状态码"""

    OK = 200
    AUTH_REQUIRED = 107
    CLOSE = 500


# =========================================================================
# 2. 报文格式
# =========================================================================

NEW_LINE = b"\n"

# 状态行: "<3 位状态码> <十进制长度>"，Varnish 会用空格把长度补齐
STATUS_LINE_PATTERN = re.compile(rb"^(\d{3}) (\d+)\s*$")

# status 命令响应体中的子进程状态
CHILD_STATE_PATTERN = re.compile(r"Child in state (\w+)")
CHILD_RUNNING = "running"

# 错误响应体每行的前缀
BODY_LINE_MARKER = "> "


# =========================================================================
# 3. 认证常量
# =========================================================================


class AuthConst:
    # Banner 前 32 字节即为 Challenge
    CHALLENGE_LEN = 32


# =========================================================================
# 4. 连接默认值
# =========================================================================

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6082
DEFAULT_TIMEOUT = 5.0
