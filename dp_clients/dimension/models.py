from __future__ import annotations

from pydantic import BaseModel, Field


class AreaType(BaseModel):
    id: str = ""
    label: str = ""
    total_count: int = 0


class GetAreaTypesResponse(BaseModel):
    area_types: list[AreaType] = Field(default_factory=list)


class Area(BaseModel):
    id: str = ""
    label: str = ""
    area_type: str = ""


class GetAreasResponse(BaseModel):
    areas: list[Area] = Field(default_factory=list)


class GetAreasInput(BaseModel):
    user_auth_token: str = ""
    service_auth_token: str = ""
    dataset_id: str
    area_type_id: str
    text: str = ""


class ErrorResp(BaseModel):
    errors: list[str] = Field(default_factory=list)
