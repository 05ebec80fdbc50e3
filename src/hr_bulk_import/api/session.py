from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "ApiSession",
]


@dataclass
class ApiSession:
    """Explicit per-operator session: backend base URL plus bearer token.

    Passed to the API client instead of reading a process-wide token store.
    The client clears the token when the backend answers 401.
    """
    base_url: str
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def clear(self) -> None:
        self.token = None
