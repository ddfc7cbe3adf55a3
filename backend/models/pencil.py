from pydantic import BaseModel


class PencilSchema(BaseModel):
    id: str
    brand: str
    number: str
    name: str
    hex: str
    custom: bool = False


class MatchResultSchema(BaseModel):
    pencil: PencilSchema
    distance: float
    confidence: int
    is_owned: bool = False


class MatchResponse(BaseModel):
    hex: str
    matches: list[MatchResultSchema]
