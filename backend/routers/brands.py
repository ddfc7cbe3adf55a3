"""/api/brands — the caller's registry of custom brand names."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..models.requests import BrandRequest
from ..services.pencil_store import InvalidBrand, PencilStore
from .deps import current_user_id, get_store

router = APIRouter(prefix="/api")


@router.get("/brands")
async def list_brands(
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> list[dict[str, str]]:
    return store.list_brands(user_id)


@router.post("/brands")
async def create_brand(
    req: BrandRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, str]:
    try:
        return store.create_brand(user_id, req.name)
    except InvalidBrand as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/brands")
async def delete_brand(
    id: str,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> dict[str, bool]:
    store.delete_brand(user_id, id)
    return {"success": True}
