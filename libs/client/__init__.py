"""Python client for the members API with an explicit per-session state store.

Usage:
    from libs.client import FitCentreClient

    async with FitCentreClient("http://localhost:8000/api") as api:
        await api.login("jane@example.com", "Secret#123")
        page = await api.list_members(search="jane")
"""

from libs.client.client import FitCentreClient
from libs.client.errors import ApiError
from libs.client.state import ClientState

__all__ = [
    "ApiError",
    "ClientState",
    "FitCentreClient",
]
