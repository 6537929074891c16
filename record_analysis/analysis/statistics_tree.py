# ==============================================
# StatisticsTree
# ==============================================
#
# PURPOSE:
#   Schema-shaped container for running statistics. One node per
#   FieldSpec, in schema order, at every nesting level.
#
# CLASS: StatisticsNode (dataclass)
# ---------------------------------
#   Attributes:
#   -----------
#   - name: str                     → Field name at this level
#   - type: TypeTag                 → Declared type
#   - count: int                    → Values folded in (presence count for
#                                     non-numeric leaves)
#   - mean: float                   → Running mean (numeric leaves)
#   - sum_squared_deviations: float → Running M2 (numeric leaves)
#   - children: list[StatisticsNode] | None → Nested nodes (customobject)
#
#   Computed Properties:
#   --------------------
#   - variance -> float             → Population variance, M2 / count
#   - standard_deviation -> float   → sqrt(variance)
#
#   Methods:
#   --------
#   - to_dict() -> dict             → Persisted form (keeps M2)
#   - to_report() -> dict           → Caller-facing form (mean/stddev only)
#   - from_dict(data) -> StatisticsNode (classmethod)
#
# StatisticsTree is a plain list of StatisticsNode.
#
# ==============================================

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from record_analysis.errors import InvalidInput
from record_analysis.schema import TypeTag


CHILDREN_KEY = "field_attributes"


@dataclass
class StatisticsNode:
    """Running statistics for one schema field."""

    name: str
    type: TypeTag

    # --- Running state (numeric leaves) ---
    count: int = 0
    mean: float = 0.0
    sum_squared_deviations: float = 0.0

    # --- Structure ---
    children: Optional[List["StatisticsNode"]] = None

    @property
    def is_numeric(self) -> bool:
        return self.type.is_numeric

    @property
    def is_nested(self) -> bool:
        return self.type.is_nested

    @property
    def variance(self) -> float:
        if self.count == 0:
            return 0.0
        return self.sum_squared_deviations / self.count

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)

    # ======================================
    # Serialization
    # ======================================
    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize for the Analysis Store.

        Numeric leaves keep their M2 accumulator so incremental updates
        can continue after a reload.
        """
        data: Dict[str, Any] = {"name": self.name, "type": self.type.wire_name}
        if self.is_nested:
            data[CHILDREN_KEY] = tree_to_dicts(self.children or [])
            return data

        data["count"] = self.count
        if self.is_numeric:
            data["mean"] = self.mean
            data["standard_deviation"] = self.standard_deviation
            data["sum_squared_deviations"] = self.sum_squared_deviations
        return data

    def to_report(self) -> Dict[str, Any]:
        """Serialize for the caller: name, type, count, mean, standard deviation."""
        data: Dict[str, Any] = {"name": self.name, "type": self.type.wire_name}
        if self.is_nested:
            data[CHILDREN_KEY] = tree_to_report(self.children or [])
            return data

        data["count"] = self.count
        if self.is_numeric:
            data["mean"] = self.mean
            data["standard_deviation"] = self.standard_deviation
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatisticsNode":
        """
        Reconstruct a node from its persisted form.

        Raises:
            InvalidInput: If the stored type name is unknown.
        """
        tag = TypeTag.from_wire(data.get("type"))
        if tag is None:
            raise InvalidInput(f"Stored statistics node has unknown type {data.get('type')!r}")

        node = cls(name=data["name"], type=tag)
        if tag.is_nested:
            node.children = tree_from_dicts(data.get(CHILDREN_KEY, []))
            return node

        node.count = int(data.get("count", 0))
        node.mean = float(data.get("mean", 0.0))
        node.sum_squared_deviations = float(data.get("sum_squared_deviations", 0.0))
        return node


StatisticsTree = List[StatisticsNode]


def tree_to_dicts(tree: StatisticsTree) -> List[Dict[str, Any]]:
    return [node.to_dict() for node in tree]


def tree_to_report(tree: StatisticsTree) -> List[Dict[str, Any]]:
    return [node.to_report() for node in tree]


def tree_from_dicts(data: List[Dict[str, Any]]) -> StatisticsTree:
    return [StatisticsNode.from_dict(item) for item in data]
