"""POST /api/match — sampled color → closest pencils."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..models.pencil import MatchResponse, PencilSchema
from ..models.requests import MatchRequest, PixelMatchRequest
from ..services import pixel_sampler
from ..services.catalog import catalog_snapshot
from ..services.color_matcher import ColorMatcher, MatchFilter
from ..services.color_space import InvalidColorFormat, normalize_hex
from ..services.pencil_store import PencilStore
from .deps import current_user_id, get_matcher, get_store

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def _run_match(
    hex_color: str,
    limit: int,
    allowed_brands: Optional[list[str]],
    restrict_to_ids: Optional[list[str]],
    prioritize_owned: bool,
    user_id: str,
    store: PencilStore,
    matcher: ColorMatcher,
) -> dict[str, Any]:
    match_filter = MatchFilter.build(
        allowed_brands=allowed_brands,
        restrict_to_ids=restrict_to_ids,
        owned_ids=store.owned_ids(user_id),
        prioritize_owned=prioritize_owned,
    )
    # Point-in-time read of the user's custom pencils
    custom = store.get_custom_catalog(user_id)
    try:
        matches = matcher.find_top_matches(hex_color, limit, match_filter, custom=custom)
        normalized = normalize_hex(hex_color)
    except InvalidColorFormat as e:
        raise HTTPException(status_code=422, detail=f"Invalid color: {e.value!r}")

    return {
        "hex": normalized,
        "matches": [m.to_dict() for m in matches],
    }


@router.post("/match", response_model=MatchResponse)
async def match_color(
    req: MatchRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
    matcher: ColorMatcher = Depends(get_matcher),
) -> dict[str, Any]:
    return _run_match(
        req.hex, req.limit, req.allowed_brands, req.restrict_to_ids,
        req.prioritize_owned, user_id, store, matcher,
    )


@router.post("/match/pixel", response_model=MatchResponse)
async def match_pixel(
    req: PixelMatchRequest,
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
    matcher: ColorMatcher = Depends(get_matcher),
) -> dict[str, Any]:
    """
    Sample a photo at (x, y) and match the averaged color.

    Flow:
      1. Decode base64 image
      2. Average the 3×3 window around the pixel
      3. Rank pencils against the sampled color
    """
    try:
        image_bytes = pixel_sampler.image_bytes_from_base64(req.image_base64)
        pixels = pixel_sampler.load_rgba(image_bytes)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Invalid image data: {e}")

    try:
        sampled = pixel_sampler.sample_pixels(pixels, req.x, req.y)
    except pixel_sampler.SampleOutOfBounds as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Sampled {sampled} at ({req.x}, {req.y})")
    return _run_match(
        sampled, req.limit, req.allowed_brands, req.restrict_to_ids,
        req.prioritize_owned, user_id, store, matcher,
    )


@router.get("/catalog", response_model=list[PencilSchema])
async def get_catalog(
    user_id: str = Depends(current_user_id),
    store: PencilStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """Built-in pencils followed by the caller's custom pencils."""
    return [p.to_dict() for p in catalog_snapshot(store, user_id)]
