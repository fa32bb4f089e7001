from . import server_path
from .listeners import ListenerList
from .time import parse_server_date

__all__ = [
    "server_path",
    "ListenerList",
    "parse_server_date",
]
