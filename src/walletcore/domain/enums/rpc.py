from enum import Enum


class RpcCallStatus(str, Enum):
    """Outcome of a JSON-RPC attempt that may legitimately be unsupported by the node."""

    OK = "ok"
    UNSUPPORTED = "unsupported"
    ERROR = "error"
