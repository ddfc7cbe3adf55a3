"""/api/inventory and /api/drawings/{id}/pencils — id-keyed references to pencils."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ..models.requests import DrawingPencilRequest, InventoryRequest
from ..services.catalog import InvalidPencilKey
from ..services.pencil_store import PencilStore
from .deps import current_user_id, get_store

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/inventory")
async def get_inventory(
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    return {"owned": sorted(store.owned_ids(user_id))}


@router.post("/inventory")
async def update_inventory(
    req: InventoryRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        store.set_owned(user_id, req.id, req.is_owned)
    except InvalidPencilKey as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"success": True}


@router.get("/drawings/{drawing_id}/pencils")
async def get_drawing_pencils(
    drawing_id: str,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    return {"drawing_id": drawing_id, "pencils": store.drawing_pencils(user_id, drawing_id)}


@router.post("/drawings/{drawing_id}/pencils")
async def add_drawing_pencil(
    drawing_id: str,
    req: DrawingPencilRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        store.add_pencil_to_drawing(user_id, drawing_id, req.pencil_id)
    except InvalidPencilKey as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"success": True}


@router.delete("/drawings/{drawing_id}/pencils")
async def remove_drawing_pencil(
    drawing_id: str,
    pencil_id: str,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    store.remove_pencil_from_drawing(user_id, drawing_id, pencil_id)
    return {"success": True}
