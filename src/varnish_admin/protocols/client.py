"""
Varnish CLI 协议客户端 (Protocol Client)

职责：
1. 握手：读取 Banner，必要时完成 Challenge/Response 认证。
2. 命令执行：写入命令，分帧读取响应，校验状态码。
"""

import logging
from typing import TYPE_CHECKING

from ..exceptions import (
    AuthenticationError,
    ConfigError,
    ProtocolError,
    StateError,
    VarnishAdminError,
)
from ..state import ClientStatus
from . import auth, framing
from .constants import NEW_LINE, StatusCode

if TYPE_CHECKING:
    from ..config import VarnishAdminConfig
    from ..network import Transport
    from ..state import AdminState
    from .commands import CommandSet

logger = logging.getLogger(__name__)


class AdminProtocol:
    """varnishadm 协议交互的编排者。

    本类不打开也不关闭连接，只使用已经打开的 Transport。
    """

    def __init__(
        self,
        config: "VarnishAdminConfig",
        state: "AdminState",
        transport: "Transport",
        commands: "CommandSet",
    ) -> None:
        """初始化协议客户端。

        Args:
            config: 全局配置对象。
            state: 共享状态对象。
            transport: 已打开 (或即将打开) 的传输层。
            commands: 当前版本的命令表。
        """
        self.config = config
        self.state = state
        self.transport = transport
        self.commands = commands

    def handshake(self) -> str:
        """执行连接后的握手流程。

        Returns:
            str: 服务器 Banner。认证时为 auth 命令的响应体。

        Raises:
            ConfigError: 服务器要求认证但未配置 secret。
            AuthenticationError: 认证交互失败 (原因保存在 __cause__)。
            ProtocolError: Banner 状态码既不是 200 也不是 107。
            TransportError: 读取 Banner 时出错。
        """
        response = framing.read_response(self.transport)

        if response.code == StatusCode.AUTH_REQUIRED:
            if not self.config.secret:
                raise ConfigError(
                    "服务器要求认证 (107)，但未配置 secret"
                )

            logger.info("服务器发出认证质询，开始认证...")
            command = auth.build_auth_command(
                self.commands.auth, response.body, self.config.secret
            )
            try:
                body = self.execute(command, StatusCode.OK)
            except VarnishAdminError as e:
                logger.debug(f"认证交互失败: {e}")
                raise AuthenticationError("认证失败 (Authentication failed)") from e

            self.state.status = ClientStatus.AUTHENTICATED
            return body.decode("utf-8", errors="replace")

        if response.code != StatusCode.OK:
            raise ProtocolError(
                f"来自 varnishadm 的异常响应 (Bad response) "
                f"{self.config.host}:{self.config.port}",
                code=response.code,
                body=response.body,
            )

        self.state.status = ClientStatus.CONNECTED
        return response.text

    def execute(self, command: str, expected_code: int = StatusCode.OK) -> bytes:
        """写入一条命令并读取响应。

        Args:
            command: 命令文本 (不含换行)。为空时只发送换行。
            expected_code: 期望的状态码。

        Returns:
            bytes: 原始响应体。未配置主机时直接返回 b""。

        Raises:
            StateError: 客户端已关闭。
            ProtocolError: 响应状态码与期望值不一致。
            TransportError: 读写出错。
        """
        if not self.config.host:
            logger.debug(f"未配置主机，跳过命令: {self._loggable(command)}")
            return b""

        if self.state.is_closed:
            raise StateError(f"客户端已关闭，无法执行命令: {self._loggable(command)}")

        logger.debug(f">>> {self._loggable(command)}")
        if command:
            self.transport.write(command.encode("utf-8"))
        self.transport.write(NEW_LINE)

        response = framing.read_response(self.transport)

        if response.code != expected_code:
            raise ProtocolError(
                f"{self._loggable(command)} command responded {response.code}:\n"
                f"{framing.format_body(response.body)}",
                command=command,
                code=response.code,
                body=response.body,
            )

        return response.body

    def _loggable(self, command: str) -> str:
        """返回可写入日志的命令文本，隐藏认证摘要。"""
        if command.startswith(self.commands.auth + " "):
            return f"{self.commands.auth} ***"
        return command
