"""Shared request dependencies: the caller's user id and the app-wide services."""
from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, Request

from ..services.color_matcher import ColorMatcher
from ..services.pencil_store import PencilStore


async def current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Opaque session lookup; the auth layer in front of the API sets X-User-Id."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return x_user_id.strip()


def get_store(request: Request) -> PencilStore:
    return request.app.state.store


def get_matcher(request: Request) -> ColorMatcher:
    return request.app.state.matcher
