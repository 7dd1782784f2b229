"""Projections from the generic graph response onto flat result types.

Every projection preserves the order the server returned and never fails on
missing optional fields.
"""

from __future__ import annotations

from dp_clients.cantabular import gql
from dp_clients.cantabular.models import (
    Area,
    Dimension,
    DimensionSearchResult,
    StaticDatasetTable,
    TableCategory,
    TableDimension,
    VariableSummary,
)


def _mapped_from_nodes(map_from: list[gql.Variables]) -> list[gql.Node]:
    return [edge.node for connection in map_from for edge in connection.edges]


def _to_dimension(node: gql.Node) -> Dimension:
    return Dimension(
        name=node.name,
        label=node.label,
        total_count=node.categories.total_count,
        mapped_from=[source.name for source in _mapped_from_nodes(node.map_from)],
    )


def dataset_names(response: gql.GraphResponse) -> list[str]:
    return [edge.node.name for edge in response.data.datasets.edges]


def dimensions(response: gql.GraphResponse) -> list[Dimension]:
    """Dimensions under ``dataset.variables``."""
    return [_to_dimension(edge.node) for edge in response.data.dataset.variables.edges]


def geography_dimensions(response: gql.GraphResponse) -> list[Dimension]:
    """Dimensions under ``dataset.ruleBase.isSourceOf``."""
    return [_to_dimension(edge.node) for edge in response.data.dataset.rule_base.is_source_of.edges]


def dimension_search_results(response: gql.GraphResponse) -> list[DimensionSearchResult]:
    results = []
    for edge in response.data.dataset.variables.search.edges:
        node = edge.node
        results.append(
            DimensionSearchResult(
                name=node.name,
                label=node.label,
                mapped_from_count=sum(c.total_count for c in node.map_from),
                mapped_from=[
                    VariableSummary(name=source.name, label=source.label)
                    for source in _mapped_from_nodes(node.map_from)
                ],
            )
        )
    return results


def area_search_results(response: gql.GraphResponse) -> list[Area]:
    results = []
    for edge in response.data.dataset.rule_base.is_source_of.category_search.edges:
        node = edge.node
        results.append(
            Area(
                code=node.code,
                label=node.label,
                variable=node.variable.name,
                mapped_from=[
                    VariableSummary(name=parent.name, label=parent.label)
                    for parent in _mapped_from_nodes(node.variable.map_from)
                ],
            )
        )
    return results


def static_dataset_table(response: gql.GraphResponse) -> StaticDatasetTable:
    table = response.data.dataset.table
    return StaticDatasetTable(
        dimensions=[
            TableDimension(
                name=dim.variable.name,
                label=dim.variable.label,
                count=dim.count,
                categories=[TableCategory(code=c.code, label=c.label) for c in dim.categories],
            )
            for dim in table.dimensions
        ],
        values=list(table.values),
    )
