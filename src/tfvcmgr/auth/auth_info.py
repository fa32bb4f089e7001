"""Authentication information for the TFVC REST controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "pat": ("token",),
    "basic": ("username", "password"),
}


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    Supported kinds:
        kind = "pat"
            data must include:
                - token (personal access token)
        kind = "basic"
            data must include:
                - username
                - password
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind not in _REQUIRED_KEYS:
            raise ValueError("AuthInfo.kind must be 'pat' or 'basic'")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        for key in _REQUIRED_KEYS[self.kind]:
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

    @classmethod
    def personal_access_token(cls, token: str) -> "AuthInfo":
        return cls(kind="pat", data={"token": token})

    def requests_auth(self) -> tuple[str, str]:
        """(user, password) tuple for requests; a PAT goes with an empty user name."""
        if self.kind == "pat":
            return ("", str(self.data["token"]))
        return (str(self.data["username"]), str(self.data["password"]))
