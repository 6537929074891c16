# ==============================================
# Validator
# ==============================================
#
# PURPOSE:
#   Walk a SchemaTree against one record and count what is wrong
#   with it: values of the wrong type, schema fields the record
#   lacks, and record fields the schema never declared.
#
# CLASS: Validator
# ----------------
#   Stateless - schema and record in, ValidationOutcome out.
#
#   Constructor:
#   ------------
#   - __init__(type_resolver: TypeResolver | None = None)
#
#   Methods:
#   --------
#   - validate(schema: SchemaTree, record: dict) -> ValidationOutcome
#       Depth-first, one pass per level:
#         1. Build name → FieldSpec lookup for this level
#         2. For each field present in the record:
#              not in lookup          → extra (never recursed into)
#              resolved type differs  → bad value (never recursed into)
#              nested and type agrees → recurse, add child counts
#         3. For each FieldSpec not present in the record → missing
#
#   A record that is not a mapping raises InvalidInput before any
#   counting starts.
#
# ==============================================

from collections.abc import Mapping
from typing import Any, Optional

from record_analysis.errors import InvalidInput
from record_analysis.log import get_logger
from record_analysis.schema import SchemaTree, TypeResolver, TypeTag
from .outcome import ValidationOutcome

logger = get_logger("validation")


class Validator:
    """Checks records against a registered schema."""

    def __init__(self, type_resolver: Optional[TypeResolver] = None):
        self.type_resolver = type_resolver or TypeResolver()

    def validate(self, schema: SchemaTree, record: Any) -> ValidationOutcome:
        """
        Count bad values, missing fields and extra fields in a record.

        Args:
            schema: Root level of the registered schema
            record: The submitted record

        Returns:
            The totals over this level and every nested level.

        Raises:
            InvalidInput: If the record is not a mapping.
        """
        if not isinstance(record, Mapping):
            raise InvalidInput(
                f"Record must be an object, got {type(record).__name__}"
            )
        return self._validate_level(schema, record, prefix="")

    def _validate_level(self, schema: SchemaTree, record: Mapping, prefix: str) -> ValidationOutcome:
        lookup = {spec.name: spec for spec in schema}

        bad = 0
        extra = 0
        nested_outcome = ValidationOutcome()

        for name, value in record.items():
            path = f"{prefix}{name}"
            spec = lookup.get(name)

            if spec is None:
                extra += 1
                logger.debug("Extra field '%s'", path)
                continue

            resolved = self.type_resolver.resolve(value)
            if resolved is not spec.type:
                bad += 1
                logger.debug(
                    "Bad value for '%s': received %s, expected %s",
                    path,
                    resolved.wire_name if resolved else "null/array",
                    spec.type.wire_name,
                )
                continue

            if resolved is TypeTag.NESTED_OBJECT:
                nested_outcome = nested_outcome + self._validate_level(
                    spec.children, value, prefix=f"{path}."
                )

        missing = 0
        for spec in schema:
            if spec.name not in record:
                missing += 1
                logger.debug("Missing field '%s%s'", prefix, spec.name)

        return ValidationOutcome(
            bad_value_count=bad,
            missing_field_count=missing,
            extra_field_count=extra,
        ) + nested_outcome


def validate(schema: SchemaTree, record: Any) -> ValidationOutcome:
    """Module-level shortcut for Validator().validate()."""
    return Validator().validate(schema, record)
