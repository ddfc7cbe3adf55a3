"""/api/custom-pencils — CRUD over the caller's own pencils."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ..models.pencil import PencilSchema
from ..models.requests import CustomPencilRequest, CustomPencilUpdateRequest
from ..services.catalog import InvalidPencilKey
from ..services.color_space import InvalidColorFormat
from ..services.pencil_store import DuplicatePencil, PencilNotFound, PencilStore
from .deps import current_user_id, get_store

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/custom-pencils", response_model=list[PencilSchema])
async def list_custom_pencils(
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> list[dict[str, Any]]:
    return [p.to_dict() for p in store.list_custom_pencils(user_id)]


@router.post("/custom-pencils", response_model=PencilSchema, status_code=201)
async def create_custom_pencil(
    req: CustomPencilRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        pencil = store.create_custom_pencil(user_id, req.brand, req.name, req.number, req.hex)
    except (InvalidColorFormat, InvalidPencilKey) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DuplicatePencil as e:
        raise HTTPException(status_code=409, detail=f"Pencil {e} already exists")
    return pencil.to_dict()


@router.put("/custom-pencils", response_model=PencilSchema)
async def update_custom_pencil(
    req: CustomPencilUpdateRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        pencil = store.update_custom_pencil(
            user_id, req.old_id, req.brand, req.name, req.number, req.hex
        )
    except (InvalidColorFormat, InvalidPencilKey) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PencilNotFound as e:
        raise HTTPException(status_code=404, detail=f"Pencil {e} not found")
    except DuplicatePencil as e:
        raise HTTPException(status_code=409, detail=f"Pencil {e} already exists")
    return pencil.to_dict()


@router.delete("/custom-pencils")
async def delete_custom_pencil(
    id: str,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        store.delete_custom_pencil(user_id, id)
    except PencilNotFound as e:
        raise HTTPException(status_code=404, detail=f"Pencil {e} not found")
    return {"success": True}
