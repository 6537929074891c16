# ==============================================
# TOPIC 1: SCHEMA
# ==============================================
#
# This package describes what a record is supposed to look like:
# the closed set of canonical types, how a decoded value maps onto
# one of them, and the registered, recursively nested field shape.
#
# Modules:
# --------
# - type_tags.py      → TypeTag enum (wire names, numeric set)
# - type_resolver.py  → Map a runtime value to its TypeTag
# - schema_tree.py    → FieldSpec / SchemaTree and the wire parser
#
# ==============================================

from .type_tags import TypeTag, NUMERIC_TYPES
from .type_resolver import TypeResolver
from .schema_tree import FieldSpec, SchemaTree, parse, to_wire

__all__ = [
    "TypeTag",
    "NUMERIC_TYPES",
    "TypeResolver",
    "FieldSpec",
    "SchemaTree",
    "parse",
    "to_wire",
]
