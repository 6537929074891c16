from collections.abc import Mapping
from decimal import Decimal, DecimalException
from typing import Any, Optional

from bson import Decimal128, Int64

from record_analysis.errors import InternalInconsistency
from .type_tags import TypeTag


class TypeResolver:
    """
    Maps a decoded value's runtime kind to its canonical TypeTag.

    Values come from JSON request bodies or BSON documents, so the table
    covers the kinds those decoders produce. JSON null and arrays carry
    no tag: resolve() returns None for them and they never match a
    declared type. Neither do integers outside the signed 64-bit range
    or decimals Decimal128 cannot hold exactly, since MongoDB could
    not store them. Anything else missing from the table is a defect and
    raises InternalInconsistency.
    """

    INT32_MIN = -(2 ** 31)
    INT32_MAX = 2 ** 31 - 1
    INT64_MIN = -(2 ** 63)
    INT64_MAX = 2 ** 63 - 1

    UNTYPED_KINDS = (type(None), list, tuple)

    @classmethod
    def resolve(cls, value: Any) -> Optional[TypeTag]:
        if isinstance(value, cls.UNTYPED_KINDS):
            return None

        # bool is a subclass of int, check it first
        if isinstance(value, bool):
            return TypeTag.BOOL

        # bson.Int64 is also an int subclass
        if isinstance(value, Int64):
            return TypeTag.INT64

        if isinstance(value, int):
            if cls.INT32_MIN <= value <= cls.INT32_MAX:
                return TypeTag.INT32
            if cls.INT64_MIN <= value <= cls.INT64_MAX:
                return TypeTag.INT64
            # Wider than any BSON integer
            return None

        if isinstance(value, float):
            return TypeTag.FLOAT64

        if isinstance(value, Decimal128):
            return TypeTag.DECIMAL

        if isinstance(value, Decimal):
            return TypeTag.DECIMAL if fits_decimal128(value) else None

        if isinstance(value, str):
            return TypeTag.STRING

        if isinstance(value, Mapping):
            return TypeTag.NESTED_OBJECT

        raise InternalInconsistency(
            f"No type mapping for runtime kind '{type(value).__name__}'"
        )


def fits_decimal128(value: Decimal) -> bool:
    """True when value converts to bson.Decimal128 without rounding."""
    try:
        Decimal128(value)
    except DecimalException:
        return False
    return True
