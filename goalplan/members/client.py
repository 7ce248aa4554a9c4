"""Member directory client — async HTTP access to the website's member records.

Members are JSON objects shaped like:

    {"id": ..., "login_email": ..., "profile": {"first_name", "last_name", "phone"},
     "custom_fields": {"savings_goals": [...], "membership_level": ..., "last_app_sync": ...,
                       "app_user_id": ...}}

Lookups that find nothing return None. Any other non-2xx answer or transport
failure raises MemberDirectoryError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from goalplan.config import settings
from goalplan.exceptions import MemberDirectoryError

logger = logging.getLogger(__name__)

MEMBERS_PATH = "/members/v1/members"


class MemberDirectoryClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        site_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.member_directory_url) or ""
        self.api_key = api_key if api_key is not None else settings.member_directory_api_key
        self.site_id = site_id if site_id is not None else settings.member_directory_site_id
        self.timeout = timeout if timeout is not None else settings.member_directory_timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.site_id:
            headers["site-id"] = self.site_id
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        allow_404: bool = False,
    ) -> dict[str, Any] | None:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                r = await client.request(method, path, params=params, json=json)
            except httpx.HTTPError as exc:
                logger.warning("Member directory unreachable: %s", exc)
                raise MemberDirectoryError("Member directory unreachable") from exc

        if allow_404 and r.status_code == 404:
            return None
        if r.is_error:
            logger.warning("Member directory %s %s returned %d", method, path, r.status_code)
            raise MemberDirectoryError(f"Member directory error: {r.status_code}")
        return r.json()

    async def get_member_by_email(self, email: str) -> dict[str, Any] | None:
        data = await self._request("GET", MEMBERS_PATH, params={"email": email})
        members = (data or {}).get("members") or []
        return members[0] if members else None

    async def get_member_by_id(self, member_id: str) -> dict[str, Any] | None:
        data = await self._request("GET", f"{MEMBERS_PATH}/{member_id}", allow_404=True)
        if data is None:
            return None
        return data.get("member")

    async def update_member(self, member_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        data = await self._request("PATCH", f"{MEMBERS_PATH}/{member_id}", json={"member": fields})
        return (data or {}).get("member")

    async def create_member(self, fields: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", MEMBERS_PATH, json={"member": fields})
        member = (data or {}).get("member")
        if not member or not member.get("id"):
            raise MemberDirectoryError("Member directory returned no member id")
        return member
