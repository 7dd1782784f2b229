"""Generic graph-shaped response model shared by every Cantabular GraphQL query.

One structural superset decodes the answer to any query in the catalog.
Fields a particular query does not select stay at their empty defaults, and
JSON ``null`` is treated the same as an absent field.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from dp_clients.utils.exceptions import DecodeFailed, GraphQLError, truncate_body


def _error_text(value: Any) -> Any:
    """Flatten an error reported as an object or a list into its message text."""
    if isinstance(value, dict):
        return str(value.get("message") or value)
    if isinstance(value, list):
        return "; ".join(str(_error_text(item)) for item in value)
    if value is not None and not isinstance(value, str):
        return str(value)
    return value


class GraphModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Category(GraphModel):
    code: str = ""
    label: str = ""


class Categories(GraphModel):
    total_count: int = Field(default=0, alias="totalCount")
    edges: list[Edge] = Field(default_factory=list)


class Search(GraphModel):
    edges: list[Edge] = Field(default_factory=list)


class Variables(GraphModel):
    """A connection of variables (``edges``), optionally with search results."""

    total_count: int = Field(default=0, alias="totalCount")
    edges: list[Edge] = Field(default_factory=list)
    search: Search = Field(default_factory=Search)
    category_search: Search = Field(default_factory=Search, alias="categorySearch")


class Variable(GraphModel):
    name: str = ""
    label: str = ""
    map_from: list[Variables] = Field(default_factory=list, alias="mapFrom")

    @field_validator("map_from", mode="before")
    @classmethod
    def _single_connection(cls, value: Any) -> Any:
        return [value] if isinstance(value, dict) else value


class Node(GraphModel):
    name: str = ""
    code: str = ""
    label: str = ""
    filter_only: str | None = Field(default=None, alias="filterOnly")
    categories: Categories = Field(default_factory=Categories)
    map_from: list[Variables] = Field(default_factory=list, alias="mapFrom")
    variable: Variable = Field(default_factory=Variable)

    @field_validator("filter_only", mode="before")
    @classmethod
    def _filter_only_text(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return "true" if value else "false"
        return value

    @field_validator("map_from", mode="before")
    @classmethod
    def _single_connection(cls, value: Any) -> Any:
        # The search query selects mapFrom as one connection rather than a list.
        return [value] if isinstance(value, dict) else value


class Edge(GraphModel):
    node: Node = Field(default_factory=Node)


class RuleBase(GraphModel):
    name: str = ""
    is_source_of: Variables = Field(default_factory=Variables, alias="isSourceOf")


class TableDimension(GraphModel):
    count: int = 0
    variable: Variable = Field(default_factory=Variable)
    categories: list[Category] = Field(default_factory=list)


class Table(GraphModel):
    dimensions: list[TableDimension] = Field(default_factory=list)
    values: list[int] = Field(default_factory=list)
    error: str = ""

    @field_validator("error", mode="before")
    @classmethod
    def _error_message(cls, value: Any) -> Any:
        return _error_text(value)


class Dataset(GraphModel):
    variables: Variables = Field(default_factory=Variables)
    rule_base: RuleBase = Field(default_factory=RuleBase, alias="ruleBase")
    table: Table = Field(default_factory=Table)


class Data(GraphModel):
    dataset: Dataset = Field(default_factory=Dataset)
    datasets: Variables = Field(default_factory=Variables)


class ErrorEntry(GraphModel):
    message: str = ""
    path: list[str | int] = Field(default_factory=list)


class GraphResponse(GraphModel):
    data: Data = Field(default_factory=Data)
    errors: list[ErrorEntry] = Field(default_factory=list)
    error: str = ""

    @field_validator("error", mode="before")
    @classmethod
    def _error_message(cls, value: Any) -> Any:
        return _error_text(value)

    @field_validator("errors", mode="before")
    @classmethod
    def _error_entries(cls, value: Any) -> Any:
        if isinstance(value, (str, dict)):
            value = [value]
        if isinstance(value, list):
            return [{"message": item} if isinstance(item, str) else item for item in value]
        return value

    def error_messages(self) -> list[str]:
        """Every GraphQL-level error the response reports, in document order."""
        messages = []
        if self.error:
            messages.append(self.error)
        messages.extend(e.message or "unknown GraphQL error" for e in self.errors)
        if self.data.dataset.table.error:
            messages.append(self.data.dataset.table.error)
        return messages


for _model in (Categories, Search, Variables, Variable, Node, Edge):
    _model.model_rebuild()


def decode_response(body: bytes, log_data: dict[str, Any] | None = None) -> GraphResponse:
    """Decode a raw GraphQL response body.

    Raises DecodeFailed for an empty or malformed body and GraphQLError when
    the document reports an error despite a successful transport status.
    """
    if not body.strip():
        raise DecodeFailed(
            "failed to unmarshal response body: empty body",
            body="[response body empty]",
            reason="empty body",
            log_data={**(log_data or {}), "response_body": "[response body empty]"},
        )

    try:
        response = GraphResponse.model_validate_json(body)
    except ValidationError as exc:
        snippet = truncate_body(body)
        raise DecodeFailed(
            f"failed to unmarshal response body: {exc.errors()[0]['msg']}",
            body=snippet,
            reason=str(exc),
            log_data={**(log_data or {}), "response_body": snippet},
        ) from exc

    messages = response.error_messages()
    if messages:
        raise GraphQLError(
            f"GraphQL query failed: {'; '.join(messages)}",
            errors=messages,
            log_data=log_data,
        )
    return response
