# src/varnish_admin/protocols/framing.py
"""
Varnish CLI 协议层 - 响应分帧 (Response Framing)

每条响应由状态行 "<code> <length>\\n" 和恰好 length 字节的响应体组成。
本模块只负责从字节流中切出一条完整响应，不解释状态码的业务含义。
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..exceptions import TransportError
from .constants import BODY_LINE_MARKER, STATUS_LINE_PATTERN

if TYPE_CHECKING:
    from ..network import Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    """一条 CLI 响应。

    Attributes:
        code: 3 位状态码。
        body: 响应体原始字节，长度等于状态行声明的长度。
    """

    code: int
    body: bytes

    @property
    def text(self) -> str:
        """以文本形式返回响应体。"""
        return self.body.decode("utf-8", errors="replace")


def parse_status_line(line: bytes) -> Optional[tuple[int, int]]:
    """解析状态行。

    Args:
        line: 一行原始数据 (可带结尾换行)。

    Returns:
        (code, length)；不是状态行时返回 None。
    """
    match = STATUS_LINE_PATTERN.match(line.rstrip(b"\r\n"))
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def read_response(transport: "Transport") -> Response:
    """从传输层读取一条完整响应。

    状态行之前的杂讯行会被丢弃 (Varnish 在响应体之后会多发一个换行)。
    响应体可能跨越多次底层读取，逐次累加直到达到声明长度。

    Raises:
        TransportError: 读到状态行之前数据流结束、响应体不完整、
            或底层读取超时/出错。
    """
    while True:
        line = transport.read_line()
        if not line:
            raise TransportError("数据流已结束: 未找到状态码 (no status code found)")

        status = parse_status_line(line)
        if status is not None:
            break
        logger.debug(f"丢弃状态行之前的数据: {line!r}")

    code, length = status
    body = bytearray()

    while len(body) < length:
        chunk = transport.read(length - len(body))
        if not chunk:
            # 短读直接报错，不返回残缺的响应体
            raise TransportError(
                f"响应体不完整: 期望 {length} 字节，仅收到 {len(body)} 字节"
            )
        body += chunk

    logger.debug(f"收到响应: code={code}, length={length}")
    return Response(code=code, body=bytes(body))


def format_body(body: bytes) -> str:
    """将响应体格式化为每行带 "> " 前缀的文本，用于错误信息。"""
    lines = body.decode("utf-8", errors="replace").strip().split("\n")
    return "\n".join(f"{BODY_LINE_MARKER}{line}" for line in lines)
