from .auth_info import AuthInfo

__all__ = ["AuthInfo"]
