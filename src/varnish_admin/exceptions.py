# File: src/varnish_admin/exceptions.py
"""
Varnish 管理客户端 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用能按错误类别进行精细处理。
"""

from enum import IntEnum


class VarnishAdminError(Exception):
    """varnish-admin 库所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由本库抛出的已知错误。
    """

    pass


class ConfigError(VarnishAdminError):
    """配置加载或校验失败。

    触发场景:
    1. 协议版本不受支持 (如 7.x)。
    2. 服务器要求认证，但未配置 secret。
    3. 配置文件、secret 文件不存在或字段格式错误。
    """

    pass


class TransportError(VarnishAdminError):
    """传输层错误 (I/O 级别)。

    触发场景:
    1. TCP 连接失败或连接被拒绝。
    2. 写入未能完整发送全部字节。
    3. 读取超时。
    4. 在读到状态行之前或响应体读完之前数据流结束。

    注意: 本库不做任何自动重连，调用方需显式重新 connect()。
    """

    pass


class StateError(VarnishAdminError):
    """状态机错误。

    触发场景:
    1. 在客户端已关闭 (CLOSED) 后继续发送命令。
    2. 在客户端已关闭后再次调用 connect()。
    """

    pass


class ResponseCode(IntEnum):
    """Varnish CLI 响应状态码枚举。

    取值来自 varnishadm 状态行的前三位数字。
    """

    SYNTAX = 100
    UNKNOWN = 101
    UNIMPLEMENTED = 102
    TOO_FEW = 104
    TOO_MANY = 105
    PARAM = 106
    AUTH = 107  # 认证质询，只会出现在连接后的第一条响应
    OK = 200
    TRUNCATED = 201
    CANT = 300
    COMMS = 400
    CLOSE = 500  # quit 命令的正常应答

    @property
    def description(self) -> str:
        """获取状态码对应的人类可读描述。"""
        _DESC_MAP = {
            100: "命令语法错误",
            101: "未知命令",
            102: "命令未实现",
            104: "参数过少",
            105: "参数过多",
            106: "参数无效",
            107: "需要认证",
            200: "成功",
            201: "响应被截断",
            300: "命令无法执行",
            400: "通信错误",
            500: "连接关闭",
        }
        return _DESC_MAP.get(self.value, f"未知状态码 ({self.value})")


class ProtocolError(VarnishAdminError):
    """协议交互错误 (逻辑级别)。

    当命令的响应状态码与期望值不一致，或握手阶段收到非预期的 Banner 时抛出。
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        code: int | None = None,
        body: bytes = b"",
    ) -> None:
        """初始化协议错误。

        Args:
            message: 错误描述信息。
            command: 触发错误的原始命令文本。
            code: 服务器返回的状态码。构造函数会尝试将其转换为 ResponseCode。
            body: 服务器返回的原始响应体 (诊断文本)。
        """
        self.code_enum: ResponseCode | None = None

        if code is not None:
            try:
                self.code_enum = ResponseCode(code)
            except ValueError:
                # 未登记的状态码，保留原始整数
                pass

        super().__init__(message)
        self.command = command
        self.code = code
        self.body = body


class AuthenticationError(VarnishAdminError):
    """认证握手失败。

    无论底层原因是状态码不符还是传输中断，对调用方统一报告为认证失败。
    原始异常通过 __cause__ 保留，供诊断使用。
    """

    pass
