# File: src/varnish_admin/core.py
"""
Varnish 管理客户端 (Facade)

职责：
1. 资源组装：Config + State + Transport + CommandSet。
2. 高层操作：connect / purge / purge_url / start / stop / status / quit / close。
3. 生命周期：UNCONNECTED -> CONNECTED/AUTHENTICATED -> CLOSED。
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from .config import VarnishAdminConfig
from .exceptions import StateError, VarnishAdminError
from .network import Transport
from .protocols.client import AdminProtocol
from .protocols.commands import CommandSet, parse_version, resolve_command_set
from .protocols.constants import (
    CHILD_RUNNING,
    CHILD_STATE_PATTERN,
    DEFAULT_TIMEOUT,
    StatusCode,
)
from .state import AdminState, ChildState, ClientStatus

logger = logging.getLogger(__name__)

# 状态回调函数类型别名
StatusCallback = Callable[[ClientStatus, str], Any]


class VarnishAdmin:
    """varnishadm 管理控制台客户端。

    一个实例独占一条连接，不支持多线程并发调用；
    需要并发访问时请在外部加锁，或每条连接各建一个实例。
    """

    def __init__(
        self,
        config: VarnishAdminConfig | None = None,
        transport: Transport | None = None,
        status_callback: StatusCallback | None = None,
    ) -> None:
        """初始化客户端。

        Args:
            config: 配置对象，缺省时使用全部默认值。
            transport: 传输层实例，缺省时新建一个 TCP Transport。
            status_callback: 初始状态回调。也可以使用 add_listener 注册。

        Raises:
            ConfigError: 协议版本不受支持。
        """
        self.config = config or VarnishAdminConfig()

        self._listeners: list[StatusCallback] = []
        if status_callback:
            self.add_listener(status_callback)

        self.version = parse_version(self.config.version)
        self.commands: CommandSet = resolve_command_set(self.version)

        self._state = AdminState()
        self.transport = transport or Transport()
        self.protocol = AdminProtocol(
            self.config, self._state, self.transport, self.commands
        )

        logger.debug(f"客户端已创建: {self.config!r} (protocol v{self.version.value})")

    @property
    def state(self) -> AdminState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def address(self) -> str:
        return f"{self.config.host}:{self.config.port}"

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    # --- 连接管理 ---

    def connect(self, timeout: float | None = None) -> str:
        """连接管理端口并完成握手。

        Args:
            timeout: 连接超时与单次读取超时 (秒)。缺省时依次使用
                配置中的 timeout 和默认值 5 秒。

        Returns:
            str: 服务器 Banner。

        Raises:
            StateError: 客户端已关闭。
            TransportError: 连接或读取失败。
            ConfigError: 服务器要求认证但未配置 secret。
            AuthenticationError: 认证失败。
            ProtocolError: Banner 状态码异常。
        """
        if self._state.is_closed:
            raise StateError("客户端已关闭，请新建实例后重新连接")

        timeout = timeout or self.config.timeout or DEFAULT_TIMEOUT

        try:
            self.transport.open(self.config.host, self.config.port, timeout)
            banner = self.protocol.handshake()
        except VarnishAdminError as e:
            # 握手失败时释放 Socket，状态保持 UNCONNECTED，允许调用方重新连接
            self.transport.close()
            self._state.status = ClientStatus.UNCONNECTED
            self._state.last_error = str(e)
            logger.error(f"连接 {self.address} 失败: {e}")
            raise

        self._state.banner = banner
        self._update_status(self._state.status, f"已连接 {self.address}")
        return banner

    def quit(self) -> None:
        """优雅关闭：发送 quit 命令后关闭连接。

        quit 命令本身的失败会被忽略，连接总会被关闭。
        """
        if self._state.is_closed:
            return

        try:
            self.protocol.execute(self.commands.quit, StatusCode.CLOSE)
        except VarnishAdminError as e:
            logger.debug(f"quit 命令未得到正常应答，强制关闭: {e}")

        self.close()

    def close(self) -> None:
        """直接关闭连接，不发送 quit 命令。重复调用是安全的。"""
        if self._state.is_closed:
            return

        self.transport.close()
        self._update_status(ClientStatus.CLOSED, "连接已关闭")

    def __enter__(self) -> "VarnishAdmin":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.quit()

    # --- 缓存失效 ---

    def purge(self, expr: str) -> bytes:
        """按表达式失效缓存。

        Args:
            expr: ban 表达式，形如 "<field> <operator> <arg> [&& ...]"。

        Returns:
            bytes: 命令响应体。
        """
        return self.protocol.execute(f"{self.commands.purge} {expr}")

    def purge_url(self, url: str) -> bytes:
        """按 URL 失效缓存。

        Args:
            url: URL 或 URL 正则。

        Returns:
            bytes: 命令响应体。
        """
        return self.protocol.execute(f"{self.commands.purge_url} {url}")

    # --- 子进程生命周期 ---

    def child_state(self) -> ChildState:
        """查询子进程状态，返回显式的查询结果。不会抛出异常。"""
        try:
            body = self.protocol.execute(self.commands.status)
        except VarnishAdminError as e:
            self._state.last_error = str(e)
            logger.debug(f"status 查询失败: {e}")
            return ChildState.UNREACHABLE

        match = CHILD_STATE_PATTERN.search(body.decode("utf-8", errors="replace"))
        if not match:
            return ChildState.UNKNOWN
        if match.group(1) == CHILD_RUNNING:
            return ChildState.RUNNING
        return ChildState.STOPPED

    def status(self) -> bool:
        """子进程是否处于 running 状态。任何失败都返回 False。"""
        return self.child_state() is ChildState.RUNNING

    def start(self) -> bool:
        """启动子进程。已在运行时仅给出提示。

        Raises:
            ProtocolError: start 命令被服务器拒绝。
            TransportError: 读写出错。
        """
        if self.status():
            logger.warning(f"varnish 已在运行 ({self.address})，跳过 start")
            return True

        self.protocol.execute(self.commands.start)
        logger.info(f"varnish 子进程已启动 ({self.address})")
        return True

    def stop(self) -> bool:
        """停止子进程。已停止时仅给出提示。

        Raises:
            ProtocolError: stop 命令被服务器拒绝。
            TransportError: 读写出错。
        """
        if not self.status():
            logger.warning(f"varnish 已停止 ({self.address})，跳过 stop")
            return True

        self.protocol.execute(self.commands.stop)
        logger.info(f"varnish 子进程已停止 ({self.address})")
        return True

    def _update_status(self, status: ClientStatus, msg: str) -> None:
        """更新内部状态并同步触发所有回调。"""
        self._state.status = status
        logger.info(f"[{status.name}] {msg}")

        for callback in list(self._listeners):
            try:
                callback(status, msg)
            except Exception as e:
                logger.error(f"回调执行异常: {e}")
