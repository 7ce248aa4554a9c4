"""Caller identification: service API key, member tokens, guest ids."""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass

from fastapi import Header, HTTPException, Response

from goalplan.accounts.security import decode_access_token
from goalplan.config import settings
from goalplan.exceptions import InvalidTokenError

GUEST_HEADER = "X-Guest-Id"
_GUEST_ID = re.compile(r"^guest_[0-9a-f]{8,64}$")


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str:
    """Validate the shared service key sent in X-API-Key.

    If SERVICE_API_KEY is not set, passes through (no auth).
    """
    if settings.service_api_key is None:
        return ""

    if x_api_key != settings.service_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return x_api_key


@dataclass(frozen=True, slots=True)
class Caller:
    owner_id: str  # account id for members, guest id for guests
    is_guest: bool


def new_guest_id() -> str:
    return f"guest_{secrets.token_hex(12)}"


async def get_caller(
    response: Response,
    authorization: str | None = Header(default=None),
    x_guest_id: str | None = Header(default=None, alias=GUEST_HEADER),
) -> Caller:
    """Resolve who is calling.

    A bearer token identifies a member (401 when invalid or expired).
    Anyone else is a guest; ids that do not look like guest ids are
    replaced, so a guest can never claim a member's owner id. The guest
    id in use is always echoed back on the X-Guest-Id response header.
    """
    if authorization and authorization.startswith("Bearer "):
        try:
            account_id = decode_access_token(authorization[7:].strip())
        except InvalidTokenError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return Caller(owner_id=account_id, is_guest=False)

    guest_id = x_guest_id if x_guest_id and _GUEST_ID.match(x_guest_id) else new_guest_id()
    response.headers[GUEST_HEADER] = guest_id
    return Caller(owner_id=guest_id, is_guest=True)
