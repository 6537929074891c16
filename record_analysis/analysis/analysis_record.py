# ==============================================
# AnalysisRecord (Data Class)
# ==============================================
#
# PURPOSE:
#   The per-schema running analysis kept in the Analysis Store:
#   how many records were accepted, how many rejected records showed
#   each failure kind, and the statistics tree.
#
# CLASS: AnalysisRecord (dataclass)
# ---------------------------------
#   Attributes:
#   -----------
#   - id: str                        → Schema identifier (_id in MongoDB)
#   - number_of_records: int         → Accepted records
#   - bad_value_count: int           → Rejected records with >= 1 bad value
#   - missing_field_count: int       → Rejected records with >= 1 missing field
#   - extra_field_count: int         → Rejected records with >= 1 extra field
#   - one_time_communication_failure_count: int      → Always 0, see below
#   - intermittent_communication_failure_count: int  → Always 0, see below
#   - statistics: StatisticsTree
#
#   The two communication-failure counters keep the stored document
#   shape of the older analysis collection. Submission here is a
#   direct call, so nothing ever increments them; stored values are
#   read back and written out unchanged.
#
#   Methods:
#   --------
#   - with_acceptance(statistics) -> AnalysisRecord
#   - with_rejection(outcome) -> AnalysisRecord
#       Each failure kind present in the outcome adds exactly 1,
#       whatever its magnitude.
#   - to_dict() / from_dict()        → Persisted form
#   - to_report()                    → Caller-facing form
#
# ==============================================

from dataclasses import dataclass, field, replace
from typing import Any, Dict

from record_analysis.validation import ValidationOutcome
from .statistics_tree import (
    StatisticsTree,
    tree_from_dicts,
    tree_to_dicts,
    tree_to_report,
)


@dataclass
class AnalysisRecord:
    """Running analysis for one registered schema."""

    id: str
    number_of_records: int = 0
    bad_value_count: int = 0
    missing_field_count: int = 0
    extra_field_count: int = 0
    one_time_communication_failure_count: int = 0
    intermittent_communication_failure_count: int = 0
    statistics: StatisticsTree = field(default_factory=list)

    def with_acceptance(self, statistics: StatisticsTree) -> "AnalysisRecord":
        return replace(
            self,
            number_of_records=self.number_of_records + 1,
            statistics=statistics,
        )

    def with_rejection(self, outcome: ValidationOutcome) -> "AnalysisRecord":
        return replace(
            self,
            bad_value_count=self.bad_value_count + (1 if outcome.bad_value_count else 0),
            missing_field_count=self.missing_field_count + (1 if outcome.missing_field_count else 0),
            extra_field_count=self.extra_field_count + (1 if outcome.extra_field_count else 0),
        )

    def _counters(self) -> Dict[str, Any]:
        return {
            "number_of_records": self.number_of_records,
            "bad_value_count": self.bad_value_count,
            "missing_field_count": self.missing_field_count,
            "extra_field_count": self.extra_field_count,
            "one_time_communication_failure_count": self.one_time_communication_failure_count,
            "intermittent_communication_failure_count": self.intermittent_communication_failure_count,
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize for the Analysis Store.

        Returns:
            A BSON/JSON-ready dictionary keyed by "_id".
        """
        return {
            "_id": self.id,
            **self._counters(),
            "statistics": tree_to_dicts(self.statistics),
        }

    def to_report(self) -> Dict[str, Any]:
        """Serialize for the caller, statistics in schema order."""
        return {
            "id": self.id,
            **self._counters(),
            "statistics": tree_to_report(self.statistics),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisRecord":
        return cls(
            id=data.get("_id", data.get("id")),
            number_of_records=data.get("number_of_records", 0),
            bad_value_count=data.get("bad_value_count", 0),
            missing_field_count=data.get("missing_field_count", 0),
            extra_field_count=data.get("extra_field_count", 0),
            one_time_communication_failure_count=data.get("one_time_communication_failure_count", 0),
            intermittent_communication_failure_count=data.get("intermittent_communication_failure_count", 0),
            statistics=tree_from_dicts(data.get("statistics", [])),
        )
