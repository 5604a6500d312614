# File: src/varnish_admin/state.py
"""
Varnish 管理客户端 - 状态模块

负责定义和存储所有易变的会话状态。
本模块不包含业务逻辑，仅作为数据容器供 Facade 和 AdminProtocol 共享读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class ClientStatus(Enum):
    """客户端连接的生命周期状态枚举。

    状态流转示意:
    UNCONNECTED -> CONNECTED -> AUTHENTICATED
         |             |              |
         v             v              v
       CLOSED        CLOSED         CLOSED
    """

    UNCONNECTED = auto()
    """初始状态，客户端已实例化但尚未建立连接。"""

    CONNECTED = auto()
    """已连接并收到 200 Banner，可以交换命令。"""

    AUTHENTICATED = auto()
    """服务器发出了认证质询且已通过，可以交换命令。"""

    CLOSED = auto()
    """已关闭。终态，之后的命令全部失败或安全地空操作。"""


class ChildState(Enum):
    """status 命令的显式查询结果。"""

    RUNNING = auto()
    """子进程处于 running 状态。"""

    STOPPED = auto()
    """响应中能找到子进程状态，但不是 running。"""

    UNKNOWN = auto()
    """响应中找不到 "Child in state" 字样。"""

    UNREACHABLE = auto()
    """status 命令本身失败 (传输错误、状态码不符或客户端已关闭)。"""


@dataclass
class AdminState:
    """存储一次管理会话的易变状态数据。

    Attributes:
        status: 当前连接的生命周期状态。
        banner: 握手完成后得到的 Banner 文本。
        last_error: 最近一次发生的错误信息描述。
    """

    status: ClientStatus = ClientStatus.UNCONNECTED
    banner: str = ""
    last_error: str = ""

    @property
    def is_connected(self) -> bool:
        """判断当前是否可以交换命令。"""
        return self.status in (ClientStatus.CONNECTED, ClientStatus.AUTHENTICATED)

    @property
    def is_closed(self) -> bool:
        return self.status is ClientStatus.CLOSED
