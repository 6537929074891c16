from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Bad/missing/extra field counts from checking one record.

    Counts are additive across nesting levels: a failure anywhere in the
    tree lands in the same three root-level counters.
    """
    bad_value_count: int = 0
    missing_field_count: int = 0
    extra_field_count: int = 0

    def __add__(self, other: "ValidationOutcome") -> "ValidationOutcome":
        if not isinstance(other, ValidationOutcome):
            return NotImplemented
        return ValidationOutcome(
            bad_value_count=self.bad_value_count + other.bad_value_count,
            missing_field_count=self.missing_field_count + other.missing_field_count,
            extra_field_count=self.extra_field_count + other.extra_field_count,
        )

    @property
    def is_clean(self) -> bool:
        return (
            self.bad_value_count == 0
            and self.missing_field_count == 0
            and self.extra_field_count == 0
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "bad_value_count": self.bad_value_count,
            "missing_field_count": self.missing_field_count,
            "extra_field_count": self.extra_field_count,
        }
