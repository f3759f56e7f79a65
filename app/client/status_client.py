"""
Status Client Module.

Async HTTP client for front-ends and scripts that drive opportunity and
application status changes through the API. It keeps a small in-memory
cache of fetched entities, drops the cached copy whenever a mutation
succeeds, and answers "which buttons can this user press" locally from the
same rule table the server enforces.
"""

import httpx
from typing import Any

from app.core import status_rules
from app.core.status_rules import StatusAction
from app.models.enums import OpportunityStatus, UserRole
from app.utils.logger import logger


class StatusClientError(Exception):
    """Non-2xx response from the API, carrying the server's message."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class StatusClient:
    """
    Client for the status endpoints of the TaiwanStay API.

    Attributes:
        base_url (str): API root, e.g. "https://api.taiwanstay.com".
        token (str | None): Bearer access token sent with every request.
        timeout (float): Network timeout in seconds for each request.

    Use it as an async context manager so the underlying connection pool is
    closed:

        async with StatusClient(base_url, token=token) as client:
            await client.update_opportunity_status(12, "PENDING")
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: API root URL.
            token: Optional bearer token.
            timeout: Per-request timeout in seconds.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._opportunities: dict[str, dict[str, Any]] = {}
        self._applications: dict[str, dict[str, Any]] = {}

    async def __aenter__(self) -> "StatusClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            StatusClientError: On any non-2xx status, with the API's
                ``message`` (or the raw body when it is not JSON).
        """
        response = await self._client.request(method, path, **kwargs)
        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            logger.warning(f"{method} {path} failed with {response.status_code}")
            raise StatusClientError(response.status_code, message)
        return response.json()

    def _forget_opportunity(self, ref: int | str, payload: dict[str, Any]) -> None:
        opportunity = payload.get("opportunity") or {}
        for key in (ref, opportunity.get("id_opportunity"), opportunity.get("slug")):
            if key is not None:
                self._opportunities.pop(str(key), None)

    async def get_opportunity(
        self, ref: int | str, use_cache: bool = True
    ) -> dict[str, Any]:
        """Opportunity detail (with host and history), cached by id or slug."""
        key = str(ref)
        if use_cache and key in self._opportunities:
            return self._opportunities[key]
        data = await self._request("GET", f"/opportunities/{ref}")
        self._opportunities[key] = data
        return data

    async def get_application(
        self, application_id: int, use_cache: bool = True
    ) -> dict[str, Any]:
        key = str(application_id)
        if use_cache and key in self._applications:
            return self._applications[key]
        data = await self._request("GET", f"/applications/{application_id}")
        self._applications[key] = data
        return data

    async def update_opportunity_status(
        self, ref: int | str, status: str, reason: str | None = None
    ) -> dict[str, Any]:
        """
        PATCH /opportunities/{ref}/status. The cached copy is dropped on
        success and kept on failure.
        """
        payload = await self._request(
            "PATCH",
            f"/opportunities/{ref}/status",
            json={"status": status, "reason": reason},
        )
        self._forget_opportunity(ref, payload)
        return payload

    async def admin_update_opportunity_status(
        self, ref: int | str, status: str, reason: str | None = None
    ) -> dict[str, Any]:
        payload = await self._request(
            "PATCH",
            f"/admin/opportunities/{ref}/status",
            json={"status": status, "reason": reason},
        )
        self._forget_opportunity(ref, payload)
        return payload

    async def update_application_status(
        self, application_id: int, status: str, note: str | None = None
    ) -> dict[str, Any]:
        payload = await self._request(
            "PUT",
            f"/applications/{application_id}/status",
            json={"status": status, "note": note},
        )
        self._applications.pop(str(application_id), None)
        return payload

    def is_cached(self, ref: int | str) -> bool:
        return str(ref) in self._opportunities

    @staticmethod
    def legal_actions(
        status: OpportunityStatus | str,
        role: UserRole | str,
        is_owner: bool = True,
    ) -> list[StatusAction]:
        """
        Actions to render for an opportunity, computed without a request.

        Matches ``GET /opportunities/{id}/status/actions`` for the same
        status, role and ownership.
        """
        return status_rules.available_actions(
            OpportunityStatus(status), UserRole(role), is_owner
        )
