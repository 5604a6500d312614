# src/varnish_admin/protocols/auth.py
import hashlib

from .constants import NEW_LINE, AuthConst


def extract_challenge(banner: bytes) -> bytes:
    """从 107 Banner 中提取 Challenge (前 32 字节)。"""
    return banner[: AuthConst.CHALLENGE_LEN]


def compute_auth_response(challenge: bytes, secret: str) -> str:
    """计算认证摘要。

    算法: SHA-256(challenge + "\\n" + secret + challenge + "\\n")，小写十六进制。

    Args:
        challenge: 32 字节 Challenge。
        secret: 共享密钥原文 (来自 secret 文件时可能自带结尾换行，原样使用)。

    Returns:
        str: 64 位小写十六进制摘要。
    """
    data = challenge + NEW_LINE + secret.encode("utf-8") + challenge + NEW_LINE
    return hashlib.sha256(data).hexdigest()


def build_auth_command(auth_command: str, banner: bytes, secret: str) -> str:
    """构建完整的认证命令，如 "auth <digest>"。"""
    digest = compute_auth_response(extract_challenge(banner), secret)
    return f"{auth_command} {digest}"
