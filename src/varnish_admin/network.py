# src/varnish_admin/network.py
"""
Varnish 管理客户端 - 网络模块 (Network)

封装 TCP Socket 的连接、发送和接收逻辑。
该模块屏蔽了底层 Socket 的复杂性，向协议层提供按行/按字节数读取的接口。
"""

import logging
import socket
from typing import Optional

from .exceptions import TransportError

logger = logging.getLogger(__name__)

RECV_BUFFER_SIZE = 4096
# 状态行和杂讯行的长度上限；响应体按长度读取，不受此限制
MAX_LINE_LENGTH = 8192


class Transport:
    """
    阻塞式 TCP 字节流。

    connect 时给定的超时同时约束连接本身和之后的每一次读取。
    """

    def __init__(self) -> None:
        self.sock: Optional[socket.socket] = None
        self._buffer = bytearray()

    @property
    def is_open(self) -> bool:
        return self.sock is not None

    def open(self, host: str, port: int, timeout: float) -> None:
        """
        建立 TCP 连接。
        """
        if self.sock is not None:
            self.close()

        try:
            sock = socket.create_connection((host, port), timeout=timeout)
            sock.settimeout(timeout)
        except socket.timeout:
            raise TransportError(f"连接超时 {host}:{port} ({timeout}s)") from None
        except OSError as e:
            raise TransportError(f"无法连接 {host}:{port}: {e}") from e

        self.sock = sock
        self._buffer.clear()
        logger.debug(f"TCP 连接已建立: {host}:{port}")

    def write(self, data: bytes) -> None:
        """
        发送数据。只有全部字节都被接受才算成功。
        """
        if self.sock is None:
            raise TransportError("Transport 未连接")

        try:
            self.sock.sendall(data)
        except socket.timeout:
            raise TransportError("发送超时") from None
        except OSError as e:
            raise TransportError(f"发送失败: {e}") from e

    def read_line(self) -> bytes:
        """
        读取一行 (含结尾换行)。数据流结束时返回剩余数据，无数据则返回 b""。
        超过 MAX_LINE_LENGTH 仍未遇到换行时抛出 TransportError。
        """
        while b"\n" not in self._buffer:
            if len(self._buffer) > MAX_LINE_LENGTH:
                self._buffer.clear()
                raise TransportError(f"单行数据超过 {MAX_LINE_LENGTH} 字节仍未遇到换行")
            chunk = self._recv(RECV_BUFFER_SIZE)
            if not chunk:
                line = bytes(self._buffer)
                self._buffer.clear()
                return line
            self._buffer += chunk

        index = self._buffer.index(b"\n") + 1
        line = bytes(self._buffer[:index])
        del self._buffer[:index]
        return line

    def read(self, size: int) -> bytes:
        """
        最多读取 size 字节。优先消费缓冲区，否则进行一次底层读取。
        数据流结束时返回 b""。
        """
        if self._buffer:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
            return data
        return self._recv(size)

    def _recv(self, size: int) -> bytes:
        if self.sock is None:
            raise TransportError("Transport 未连接")

        try:
            return self.sock.recv(size)
        except socket.timeout:
            raise TransportError(f"接收超时 ({self.sock.gettimeout()}s)") from None
        except OSError as e:
            raise TransportError(f"接收错误: {e}") from e

    def close(self) -> None:
        """关闭连接。重复调用是安全的。"""
        if self.sock is not None:
            try:
                self.sock.close()
            except OSError as e:
                logger.debug(f"关闭 Socket 时出错: {e}")
            self.sock = None
            logger.debug("TCP 连接已关闭")
        self._buffer.clear()
