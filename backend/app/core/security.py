from __future__ import annotations

import hashlib

from fastapi import Header, HTTPException, Request, status

from ..services.storage import StorageService

USER_HEADER = "X-Kokoro-User"
MAX_EXTERNAL_ID_LENGTH = 255


def _hash_identifier(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


async def resolve_authenticated_user(
    request: Request,
    user_header: str | None = Header(default=None, alias=USER_HEADER),
) -> int:
    """Map the upstream identity header to a local user id.

    Authentication happens in front of this service; the header carries the
    already verified subject.
    """

    external_id = (user_header or "").strip()
    if not external_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication required",
        )
    if len(external_id) > MAX_EXTERNAL_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid user id",
        )

    storage: StorageService = request.app.state.storage_service
    user = await storage.ensure_user(external_id)
    request.state.telemetry_user = _hash_identifier(external_id)
    request.state.current_user_id = user.id
    return user.id
