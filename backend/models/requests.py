from pydantic import BaseModel, Field
from typing import Optional


class MatchRequest(BaseModel):
    hex: str
    limit: int = Field(default=5, ge=0, le=100)
    allowed_brands: Optional[list[str]] = None
    restrict_to_ids: Optional[list[str]] = None
    prioritize_owned: bool = False


class PixelMatchRequest(BaseModel):
    image_base64: str
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    limit: int = Field(default=5, ge=0, le=100)
    allowed_brands: Optional[list[str]] = None
    restrict_to_ids: Optional[list[str]] = None
    prioritize_owned: bool = False


class CustomPencilRequest(BaseModel):
    brand: str = Field(min_length=1)
    name: str = ""
    number: str = Field(min_length=1)
    hex: str


class CustomPencilUpdateRequest(CustomPencilRequest):
    old_id: str


class BrandRequest(BaseModel):
    name: str


class InventoryRequest(BaseModel):
    id: str
    is_owned: bool = True


class DrawingPencilRequest(BaseModel):
    pencil_id: str
