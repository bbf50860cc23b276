"""Flatten report engine output into pandas DataFrames."""

from typing import List, Optional, Sequence

import pandas as pd

from ..models.report import ReportRow
from .engine import COUNT_KEY, GroupNode
from .fields import DEFAULT_REGISTRY, FieldRegistry


def _known_columns(columns: Sequence[str], registry: FieldRegistry) -> List[str]:
    return [key for key in columns if key in registry]


def rows_to_dataframe(
    rows: Sequence[ReportRow],
    columns: Sequence[str],
    registry: Optional[FieldRegistry] = None,
    formatted: bool = False,
) -> pd.DataFrame:
    """One DataFrame row per report row, one column per field key.

    Args:
        rows: Report rows, typically ``ReportEngineResult.filtered_rows``.
        columns: Field keys to include; unknown keys are dropped.
        registry: Field definitions; defaults to DEFAULT_REGISTRY.
        formatted: Render each cell with the field's formatter instead of
            returning raw values.

    Returns:
        DataFrame with columns in the requested order.
    """
    registry = registry if registry is not None else DEFAULT_REGISTRY
    keys = _known_columns(columns, registry)
    fields = [registry[key] for key in keys]

    data = []
    for row in rows:
        record = {}
        for fdef in fields:
            value = fdef.get_value(row)
            record[fdef.key] = fdef.format(value) if formatted else value
        data.append(record)

    return pd.DataFrame(data, columns=keys)


def group_tree_to_dataframe(
    tree: Sequence[GroupNode],
    columns: Sequence[str],
    registry: Optional[FieldRegistry] = None,
) -> pd.DataFrame:
    """One DataFrame row per group node, parents before children.

    Columns are ``depth``, ``field``, ``label``, ``count`` and then the
    aggregate of every requested column that has one.
    """
    registry = registry if registry is not None else DEFAULT_REGISTRY
    agg_keys = [
        key for key in _known_columns(columns, registry)
        if registry[key].resolved_aggregation() is not None
    ]

    data = []

    def visit(nodes: Sequence[GroupNode], depth: int) -> None:
        for node in nodes:
            record = {
                "depth": depth,
                "field": node.field,
                "label": node.label,
                "count": node.aggregates.get(COUNT_KEY, 0),
            }
            for key in agg_keys:
                record[key] = node.aggregates.get(key)
            data.append(record)
            visit(node.children, depth + 1)

    visit(tree, 0)
    return pd.DataFrame(data, columns=["depth", "field", "label", "count"] + agg_keys)
