# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from varnish_admin.config import VarnishAdminConfig


def make_response(code: int, body: bytes | str = b"") -> bytes:
    """辅助函数：按 varnishadm 的格式构造一条响应 (状态行 + 响应体 + 换行)"""
    if isinstance(body, str):
        body = body.encode()
    return f"{code} {len(body):<8}\n".encode() + body + b"\n"


class ScriptedTransport:
    """
    [测试替身] 内存中的字节流。

    按 chunk_size 切块返回预置数据，记录所有写入的字节，统计 close 次数。
    """

    def __init__(self, data: bytes = b"", chunk_size: int = 4096):
        self.data = bytearray(data)
        self.chunk_size = chunk_size
        self.written = bytearray()
        self.opened_with = None
        self.close_count = 0
        self.read_calls = 0

    def feed(self, data: bytes) -> None:
        self.data += data

    def open(self, host, port, timeout):
        self.opened_with = (host, port, timeout)

    def write(self, data: bytes) -> None:
        self.written += data

    def read_line(self) -> bytes:
        self.read_calls += 1
        index = self.data.find(b"\n")
        end = len(self.data) if index < 0 else index + 1
        line = bytes(self.data[:end])
        del self.data[:end]
        return line

    def read(self, size: int) -> bytes:
        self.read_calls += 1
        n = min(size, self.chunk_size)
        chunk = bytes(self.data[:n])
        del self.data[:n]
        return chunk

    def close(self) -> None:
        self.close_count += 1


@pytest.fixture
def valid_config() -> VarnishAdminConfig:
    """[Fixture] 返回一个带 secret 的 4.x 配置对象。"""
    return VarnishAdminConfig(
        host="127.0.0.1",
        port=6082,
        version="4.1",
        secret="s3cr3t",
        timeout=5.0,
    )


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()
