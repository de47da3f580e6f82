from typing import Optional

import httpx


class ApiError(Exception):
    """Error response from the members API, unpacked from its JSON envelope."""

    def __init__(
        self,
        status: int,
        message: str,
        errors: Optional[dict[str, list[str]]] = None,
    ):
        self.status = status
        self.message = message
        self.errors = errors or {}
        super().__init__(f"{status}: {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or response.reason_phrase or "Request failed."
        errors = body.get("errors") if isinstance(body.get("errors"), dict) else None
        return cls(response.status_code, message, errors)

    def first_error(self, field: str) -> Optional[str]:
        messages = self.errors.get(field)
        return messages[0] if messages else None
