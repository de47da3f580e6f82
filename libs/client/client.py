"""Async HTTP client for the members API."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from libs.client.errors import ApiError
from libs.client.state import ClientState
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)

# Default timeout for API calls (seconds).
_DEFAULT_TIMEOUT = 10.0


class FitCentreClient:
    """Typed entry points over the REST API, backed by a ``ClientState``.

    Any 401 response clears the session held in ``state``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        state: Optional[ClientState] = None,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.state = state or ClientState()
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "FitCentreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        headers = {}
        if self.state.token:
            headers["Authorization"] = f"Bearer {self.state.token}"
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        if params:
            params = {key: value for key, value in params.items() if value is not None}

        response = await self._http.request(
            method, path, json=json, params=params, headers=headers
        )
        if response.status_code == 401:
            self.state.clear_session()
        if response.is_error:
            error = ApiError.from_response(response)
            logger.debug("%s %s failed: %s", method, path, error)
            raise error
        return response

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def register(
        self, name: str, email: str, password: str, password_confirmation: str
    ) -> dict:
        """Create an account. Does not log in."""
        response = await self._request(
            "POST",
            "/auth/register",
            json={
                "name": name,
                "email": email,
                "password": password,
                "password_confirmation": password_confirmation,
            },
        )
        return response.json()["user"]

    async def login(self, email: str, password: str) -> dict:
        response = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        body = response.json()
        self.state.set_session(body["user"], body["token"])
        return body["user"]

    async def logout(self) -> None:
        """Revoke the current token. The local session is cleared either way."""
        try:
            if self.state.token:
                await self._request("POST", "/auth/logout")
        finally:
            self.state.clear_session()

    async def logout_all(self) -> int:
        try:
            response = await self._request("POST", "/auth/logout-all")
            return response.json()["revoked"]
        finally:
            self.state.clear_session()

    async def me(self) -> dict:
        response = await self._request("GET", "/auth/me")
        user = response.json()["user"]
        if self.state.token:
            self.state.set_session(user, self.state.token)
        return user

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    async def list_members(
        self,
        *,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict]:
        response = await self._request(
            "GET",
            "/members",
            params={
                "page": page,
                "per_page": per_page,
                "search": search,
                "status": status,
            },
        )
        body = response.json()
        self.state.cache_members(body["data"], body["meta"])
        return body["data"]

    async def list_expiring(self, *, days: Optional[int] = None) -> list[dict]:
        response = await self._request("GET", "/members/expiring", params={"days": days})
        return response.json()["data"]

    async def get_member(self, member_id: int) -> dict:
        response = await self._request("GET", f"/members/{member_id}")
        member = response.json()["data"]
        self.state.cache_member(member)
        return member

    async def create_member(self, data: dict[str, Any]) -> dict:
        response = await self._request("POST", "/members", json=data)
        member = response.json()["data"]
        self.state.cache_member(member)
        return member

    async def update_member(self, member_id: int, data: dict[str, Any]) -> dict:
        response = await self._request("PATCH", f"/members/{member_id}", json=data)
        member = response.json()["data"]
        self.state.cache_member(member)
        return member

    async def delete_member(self, member_id: int) -> None:
        await self._request("DELETE", f"/members/{member_id}")
        self.state.forget_member(member_id)

    async def restore_member(self, member_id: int) -> dict:
        response = await self._request("POST", f"/members/{member_id}/restore")
        member = response.json()["data"]
        self.state.cache_member(member)
        return member
