"""Flat result types returned by the Cantabular client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


class VariableSummary(_Result):
    name: str
    label: str = ""


class Dimension(_Result):
    """A dataset variable with its category count and source variables."""

    name: str
    label: str = ""
    total_count: int = 0
    mapped_from: list[str] = Field(default_factory=list)


class DimensionSearchResult(_Result):
    name: str
    label: str = ""
    # totalCount of the mapFrom connection, not of the variable's categories
    mapped_from_count: int = 0
    mapped_from: list[VariableSummary] = Field(default_factory=list)


class Area(_Result):
    code: str
    label: str = ""
    variable: str = ""
    mapped_from: list[VariableSummary] = Field(default_factory=list)


class TableCategory(_Result):
    code: str
    label: str = ""


class TableDimension(_Result):
    name: str
    label: str = ""
    count: int = 0
    categories: list[TableCategory] = Field(default_factory=list)


class StaticDatasetTable(_Result):
    dimensions: list[TableDimension] = Field(default_factory=list)
    values: list[int] = Field(default_factory=list)


# ── Codebook (REST) ──────────────────────────────────────────────────


class CodebookVariable(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    label: str = ""
    len: int = 0
    codes: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    map_from: list[str] = Field(default_factory=list, alias="mapFrom")
    map_from_codes: list[str] = Field(default_factory=list, alias="mapFromCodes")


class CodebookDataset(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    label: str = ""
    description: str = ""
    size: int = 0


class GetCodebookResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    codebook: list[CodebookVariable] = Field(default_factory=list)
    dataset: CodebookDataset = Field(default_factory=CodebookDataset)
