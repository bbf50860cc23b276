"""Report aggregation engine.

``run_report_engine`` runs a fixed pipeline over report rows:

    filter -> sort -> group -> aggregate

The engine knows nothing about pursuits or comps; every value it touches
comes from a field accessor in the registry. It never raises for bad
configuration: unknown fields and operators degrade to pass-through.
"""

import functools
import math
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..core.logging import get_logger
from ..models.report import FilterOperator, ReportConfig, ReportFilter, ReportRow, SortSpec
from .coercion import is_missing, to_number, to_text
from .fields import DEFAULT_REGISTRY, AggregationMode, FieldDefinition, FieldRegistry

logger = get_logger(__name__)

EMPTY_GROUP_LABEL = "(Empty)"
COUNT_KEY = "_count"

Aggregates = Dict[str, Optional[float]]


@dataclass
class GroupNode:
    """One group in the report tree.

    ``rows`` is filled only on the deepest group-by level; ``aggregates``
    is filled on every level, over all rows beneath the node.
    """

    label: str
    field: str
    value: str
    children: List["GroupNode"] = field(default_factory=list)
    rows: List[ReportRow] = field(default_factory=list)
    aggregates: Aggregates = field(default_factory=dict)

    @property
    def count(self) -> int:
        return int(self.aggregates.get(COUNT_KEY) or 0)

    def walk(self) -> Iterator["GroupNode"]:
        """Yield this node and its descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class ReportEngineResult:
    """Output of one engine run."""

    filtered_rows: List[ReportRow]
    group_tree: List[GroupNode]
    total_aggregates: Aggregates
    is_grouped: bool


def _collation_key(text: str):
    """Locale-style ordering key: accents and case break ties only.

    ``"éclair"`` sorts with the e words and ``"Apple"`` just before
    ``"apple"``. Collation beyond stripping combining marks (ligatures,
    language-specific alphabets) is not attempted.
    """
    folded = text.casefold()
    base = "".join(
        ch for ch in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(ch)
    )
    return (base, folded, text)


def _compare_text(a: str, b: str) -> int:
    ka, kb = _collation_key(a), _collation_key(b)
    return (ka > kb) - (ka < kb)


# =============================================================================
# Filter
# =============================================================================

def _matches(raw: Any, operator: str, target: Any) -> bool:
    if operator in (FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE):
        left, right = to_number(raw), to_number(target)
        if operator == FilterOperator.GT:
            return left > right
        if operator == FilterOperator.LT:
            return left < right
        if operator == FilterOperator.GTE:
            return left >= right
        return left <= right

    text = "" if raw is None else to_text(raw).lower()
    needle = "" if target is None else to_text(target).lower()

    if operator == FilterOperator.EQUALS:
        return text == needle
    if operator == FilterOperator.NOT_EQUALS:
        return text != needle
    if operator == FilterOperator.CONTAINS:
        return needle in text
    return True


def _known_operator(operator: Any) -> bool:
    try:
        FilterOperator(operator)
    except ValueError:
        return False
    return True


def apply_filters(
    rows: Sequence[ReportRow],
    filters: Sequence[ReportFilter],
    registry: FieldRegistry = DEFAULT_REGISTRY,
) -> List[ReportRow]:
    """Keep rows that satisfy every filter.

    Text operators compare lower-cased strings; ``gt``/``lt``/``gte``/``lte``
    compare numbers, with missing values counting as 0 and unparseable text
    as NaN (which fails every comparison). A filter on an unknown field or
    with an unknown operator is ignored.
    """
    active = []
    for f in filters:
        fdef = registry.get(f.field)
        if fdef is None:
            logger.warning("Ignoring filter on unknown field %r", f.field)
            continue
        if not _known_operator(f.operator):
            logger.warning("Ignoring filter with unknown operator %r on %r", f.operator, f.field)
            continue
        active.append((fdef, FilterOperator(f.operator), f.value))

    if not active:
        return list(rows)

    kept = [
        row for row in rows
        if all(_matches(fdef.get_value(row), op, value) for fdef, op, value in active)
    ]
    logger.debug("Filtered %d rows to %d with %d filters", len(rows), len(kept), len(active))
    return kept


# =============================================================================
# Sort
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare_values(a: Any, b: Any) -> int:
    if _is_number(a) and _is_number(b):
        diff = a - b
        if math.isnan(diff):
            return 0
        return (diff > 0) - (diff < 0)
    return _compare_text(to_text(a), to_text(b))


def apply_sorting(
    rows: Sequence[ReportRow],
    sort_by: Optional[SortSpec],
    registry: FieldRegistry = DEFAULT_REGISTRY,
) -> List[ReportRow]:
    """Stable sort on one field; ``None`` values go last in either direction."""
    if sort_by is None:
        return list(rows)
    fdef = registry.get(sort_by.field)
    if fdef is None:
        logger.warning("Ignoring sort on unknown field %r", sort_by.field)
        return list(rows)

    direction = -1 if sort_by.descending else 1
    values = {id(row): fdef.get_value(row) for row in rows}

    def compare(a: ReportRow, b: ReportRow) -> int:
        va, vb = values[id(a)], values[id(b)]
        if va is None and vb is None:
            return 0
        if va is None:
            return 1
        if vb is None:
            return -1
        return _compare_values(va, vb) * direction

    return sorted(rows, key=functools.cmp_to_key(compare))


# =============================================================================
# Aggregate
# =============================================================================

def compute_aggregates(
    rows: Sequence[ReportRow],
    registry: FieldRegistry = DEFAULT_REGISTRY,
) -> Aggregates:
    """Sum or average every numeric field over ``rows``.

    Values that are ``None``, ``''`` or not numeric are skipped. A field with
    no usable values aggregates to ``None``, which is distinct from a sum of
    zeros. ``_count`` is the number of rows.
    """
    aggregates: Aggregates = {}
    for fdef in registry.numeric_fields():
        mode = fdef.resolved_aggregation()
        total = 0.0
        count = 0
        for row in rows:
            raw = fdef.get_value(row)
            if is_missing(raw):
                continue
            number = to_number(raw)
            if math.isnan(number):
                continue
            total += number
            count += 1

        if count == 0:
            aggregates[fdef.key] = None
        elif mode == AggregationMode.AVG:
            aggregates[fdef.key] = total / count
        else:
            aggregates[fdef.key] = total

    aggregates[COUNT_KEY] = len(rows)
    return aggregates


# =============================================================================
# Group
# =============================================================================

def _group_key(fdef: FieldDefinition, row: ReportRow) -> str:
    raw = fdef.get_value(row)
    return EMPTY_GROUP_LABEL if is_missing(raw) else to_text(raw)


def build_group_tree(
    rows: Sequence[ReportRow],
    group_by: Sequence[str],
    registry: FieldRegistry = DEFAULT_REGISTRY,
    depth: int = 0,
) -> List[GroupNode]:
    """Partition rows recursively, one level per group-by key.

    Nodes on each level are ordered alphabetically by their key; rows keep
    their incoming order within a node. Unknown keys are skipped.
    """
    fields = [registry.get(key) for key in group_by]
    fields = [f for f in fields if f is not None]
    return _build_level(rows, fields, depth, registry)


def _build_level(
    rows: Sequence[ReportRow],
    fields: Sequence[FieldDefinition],
    depth: int,
    registry: FieldRegistry,
) -> List[GroupNode]:
    if depth >= len(fields):
        return []

    fdef = fields[depth]
    groups: Dict[str, List[ReportRow]] = {}
    for row in rows:
        groups.setdefault(_group_key(fdef, row), []).append(row)

    is_leaf = depth == len(fields) - 1
    nodes = []
    for key in sorted(groups, key=_collation_key):
        group_rows = groups[key]
        nodes.append(
            GroupNode(
                label=key,
                field=fdef.key,
                value=key,
                children=_build_level(group_rows, fields, depth + 1, registry),
                rows=list(group_rows) if is_leaf else [],
                aggregates=compute_aggregates(group_rows, registry),
            )
        )
    return nodes


# =============================================================================
# Pipeline
# =============================================================================

def run_report_engine(
    rows: Optional[Sequence[ReportRow]],
    config: ReportConfig,
    field_registry: Optional[FieldRegistry] = None,
) -> ReportEngineResult:
    """Filter, sort, group and total report rows.

    Args:
        rows: Report rows; ``None`` is treated as no rows.
        config: Filters, sort and group-by keys. Group-by keys missing from
            the registry are dropped with a warning rather than producing
            an empty level, so ``is_grouped`` is true only when at least
            one key is registered.
        field_registry: Field definitions; defaults to DEFAULT_REGISTRY.

    Returns:
        ReportEngineResult with the sorted rows, the group tree (empty when
        ungrouped) and grand-total aggregates.

    Example:
        >>> result = run_report_engine(rows, ReportConfig(group_by=["region"]))
        >>> [(n.label, n.count) for n in result.group_tree]
        [('ATX', 1), ('DFW', 2)]
    """
    registry = field_registry if field_registry is not None else DEFAULT_REGISTRY

    if not rows:
        return ReportEngineResult(
            filtered_rows=[],
            group_tree=[],
            total_aggregates={COUNT_KEY: 0},
            is_grouped=False,
        )

    filtered = apply_filters(rows, config.filters, registry)
    ordered = apply_sorting(filtered, config.sort_by, registry)

    group_by = [key for key in config.group_by if key in registry]
    for key in config.group_by:
        if key not in registry:
            logger.warning("Ignoring group-by on unknown field %r", key)

    is_grouped = bool(group_by)
    group_tree = build_group_tree(ordered, group_by, registry) if is_grouped else []

    return ReportEngineResult(
        filtered_rows=ordered,
        group_tree=group_tree,
        total_aggregates=compute_aggregates(ordered, registry),
        is_grouped=is_grouped,
    )
