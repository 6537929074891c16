# ==============================================
# StatisticsEngine
# ==============================================
#
# PURPOSE:
#   Build and maintain a StatisticsTree for one schema: mean and
#   population standard deviation of every numeric field, nested
#   fields included.
#
# CLASS: StatisticsEngine
# -----------------------
#   Stateless - trees and records in, new trees out. Input trees
#   are never mutated.
#
#   Methods:
#   --------
#   - initialize(schema: SchemaTree) -> StatisticsTree
#       Zeroed mirror of the schema.
#
#   - update(tree: StatisticsTree, record: dict) -> StatisticsTree
#       Incremental path. Welford's update: count, mean and the
#       sum of squared deviations (M2) move together, so the
#       standard deviation never needs a rescan.
#
#   - update_batch(tree, records) -> StatisticsTree
#       Fold several records incrementally.
#
#   - recompute(schema: SchemaTree, records: list[dict]) -> StatisticsTree
#       Batch path and the reference definition. For each leaf,
#       project its dotted path over every record and compute
#       sum / N and the population deviation (divide by N).
#       Empty record sets give count=0, mean=0, stddev=0.
#
#   Only records that passed validation are folded in. A numeric
#   leaf value that is not a number raises InternalInconsistency.
#
# ==============================================

import math
from collections.abc import Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Any, Iterable, List, Sequence, Tuple

from bson import Decimal128

from record_analysis.errors import InternalInconsistency
from record_analysis.schema import SchemaTree
from .statistics_tree import StatisticsNode, StatisticsTree


_MISSING = object()


class StatisticsEngine:
    """Initializes, incrementally updates and batch-recomputes statistics trees."""

    def initialize(self, schema: SchemaTree) -> StatisticsTree:
        tree = []
        for spec in schema:
            if spec.type.is_nested:
                tree.append(StatisticsNode(
                    name=spec.name,
                    type=spec.type,
                    children=self.initialize(spec.children),
                ))
            else:
                tree.append(StatisticsNode(name=spec.name, type=spec.type))
        return tree

    # ======================================
    # Incremental path
    # ======================================
    def update(self, tree: StatisticsTree, record: Mapping) -> StatisticsTree:
        """
        Fold one accepted record into a tree.

        Args:
            tree: Current statistics
            record: A record that passed validation

        Returns:
            A new tree; the input tree is left untouched.
        """
        return self._update_level(tree, record, prefix="")

    def update_batch(self, tree: StatisticsTree, records: Iterable[Mapping]) -> StatisticsTree:
        for record in records:
            tree = self.update(tree, record)
        return tree

    def _update_level(self, tree: StatisticsTree, record: Mapping, prefix: str) -> StatisticsTree:
        updated = []
        for node in tree:
            path = f"{prefix}{node.name}"
            value = record.get(node.name, _MISSING)

            if value is _MISSING:
                updated.append(_copy_node(node))
                continue

            if node.is_nested:
                if not isinstance(value, Mapping):
                    raise InternalInconsistency(
                        f"Nested field '{path}' holds {type(value).__name__}, not an object"
                    )
                updated.append(replace(
                    node,
                    children=self._update_level(node.children or [], value, prefix=f"{path}."),
                ))
                continue

            if not node.is_numeric:
                updated.append(replace(node, count=node.count + 1))
                continue

            x = to_number(value, path)
            count = node.count + 1
            delta = x - node.mean
            mean = node.mean + delta / count
            m2 = node.sum_squared_deviations + delta * (x - mean)
            updated.append(replace(node, count=count, mean=mean, sum_squared_deviations=m2))
        return updated

    # ======================================
    # Batch path
    # ======================================
    def recompute(self, schema: SchemaTree, records: Sequence[Mapping]) -> StatisticsTree:
        """
        Recompute every leaf from the full set of accepted records.

        Args:
            schema: Root level of the schema
            records: Every record currently accepted for it

        Returns:
            A fresh tree built only from the records.
        """
        records = list(records)
        return self._recompute_level(schema, records, path=())

    def _recompute_level(self, schema: SchemaTree, records: List[Mapping], path: Tuple[str, ...]) -> StatisticsTree:
        tree = []
        for spec in schema:
            leaf_path = path + (spec.name,)
            if spec.type.is_nested:
                tree.append(StatisticsNode(
                    name=spec.name,
                    type=spec.type,
                    children=self._recompute_level(spec.children, records, leaf_path),
                ))
                continue

            values = [v for v in (project(r, leaf_path) for r in records) if v is not _MISSING]
            node = StatisticsNode(name=spec.name, type=spec.type, count=len(values))
            if spec.type.is_numeric and values:
                dotted = ".".join(leaf_path)
                numbers = [to_number(v, dotted) for v in values]
                mean = math.fsum(numbers) / len(numbers)
                node.mean = mean
                node.sum_squared_deviations = math.fsum((x - mean) ** 2 for x in numbers)
            tree.append(node)
        return tree


def project(record: Mapping, path: Sequence[str]) -> Any:
    """
    Follow a field-name path into a record.

    Returns the value at the end of the path, or a sentinel when any
    step along it is absent.
    """
    current: Any = record
    for name in path:
        if not isinstance(current, Mapping) or name not in current:
            return _MISSING
        current = current[name]
    return current


def to_number(value: Any, path: str) -> float:
    """
    Coerce a validated numeric value to float.

    Raises:
        InternalInconsistency: If the value is not a number.
    """
    if isinstance(value, bool):
        raise InternalInconsistency(f"Numeric field '{path}' holds a boolean")
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    raise InternalInconsistency(
        f"Numeric field '{path}' holds {type(value).__name__}, which cannot be coerced to a number"
    )


def _copy_node(node: StatisticsNode) -> StatisticsNode:
    if node.children is None:
        return replace(node)
    return replace(node, children=[_copy_node(child) for child in node.children])
