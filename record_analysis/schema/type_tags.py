# ==============================================
# TypeTag
# ==============================================
#
# PURPOSE:
#   The closed set of canonical types a schema field can declare
#   and a record value can resolve to.
#
# ENUMS:
# ------
# - TypeTag(Enum)
#     Member value is the wire name used in schema descriptions:
#       String  → "string"      Int32   → "int"
#       Int16   → "short"       Int64   → "long"
#       UInt16  → "ushort"      UInt32  → "uint"
#       UInt64  → "ulong"       Byte    → "byte"
#       SByte   → "sbyte"       Float32 → "float"
#       Float64 → "double"      Decimal → "decimal"
#       Bool    → "bool"        Char    → "char"
#       NestedObject → "customobject"
#
#     NestedObject is the only recursive case.
#
# ==============================================

from enum import Enum
from typing import Optional


class TypeTag(Enum):
    """Canonical field/value types, valued by their wire name."""
    STRING = "string"
    INT32 = "int"
    INT16 = "short"
    INT64 = "long"
    UINT16 = "ushort"
    UINT32 = "uint"
    UINT64 = "ulong"
    BYTE = "byte"
    SBYTE = "sbyte"
    FLOAT32 = "float"
    FLOAT64 = "double"
    DECIMAL = "decimal"
    BOOL = "bool"
    CHAR = "char"
    NESTED_OBJECT = "customobject"

    @property
    def wire_name(self) -> str:
        return self.value

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_TYPES

    @property
    def is_nested(self) -> bool:
        return self is TypeTag.NESTED_OBJECT

    @classmethod
    def from_wire(cls, name: str) -> Optional["TypeTag"]:
        """
        Look up a tag by its wire name, case-insensitively.

        Returns:
            The matching TypeTag, or None if the name is unknown.
        """
        if not isinstance(name, str):
            return None
        return _BY_WIRE_NAME.get(name.strip().lower())


NUMERIC_TYPES = frozenset({
    TypeTag.INT32,
    TypeTag.INT16,
    TypeTag.INT64,
    TypeTag.UINT16,
    TypeTag.UINT32,
    TypeTag.UINT64,
    TypeTag.BYTE,
    TypeTag.SBYTE,
    TypeTag.FLOAT32,
    TypeTag.FLOAT64,
    TypeTag.DECIMAL,
})

_BY_WIRE_NAME = {tag.value: tag for tag in TypeTag}
