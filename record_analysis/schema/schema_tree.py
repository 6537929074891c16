# ==============================================
# SchemaTree
# ==============================================
#
# PURPOSE:
#   The registered shape of one record kind: an ordered list of
#   named, typed fields, where a "customobject" field carries its
#   own nested list of fields.
#
# WIRE FORMAT:
# ------------
#   [
#     {"name": "classroomName", "type": "string"},
#     {"name": "professor", "type": "customobject",
#      "field_attributes": [
#          {"name": "name", "type": "string"},
#          {"name": "yearsAtRice", "type": "int"}
#      ]}
#   ]
#
#   A configuration document {"field_attributes": [...]} is accepted
#   as well; its array is the root level.
#
# DATA CLASS: FieldSpec (frozen)
# ------------------------------
#   - name: str
#   - type: TypeTag
#   - children: tuple[FieldSpec, ...] | None   (present iff NestedObject)
#
# SchemaTree is a plain tuple of FieldSpec.
#
# FUNCTIONS:
# ----------
# - parse(raw) -> SchemaTree        (raises SchemaError)
# - to_wire(schema) -> list[dict]
#
# ==============================================

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from record_analysis.errors import SchemaError
from .type_tags import TypeTag


FIELD_ATTRIBUTES_KEY = "field_attributes"


@dataclass(frozen=True)
class FieldSpec:
    """One named, typed field of a schema level."""
    name: str
    type: TypeTag
    children: Optional[Tuple["FieldSpec", ...]] = None

    def __post_init__(self):
        if self.type.is_nested and self.children is None:
            raise SchemaError(f"Field '{self.name}' is a customobject without nested fields")
        if not self.type.is_nested and self.children is not None:
            raise SchemaError(f"Field '{self.name}' of type '{self.type.wire_name}' cannot have nested fields")

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type.wire_name}
        if self.children is not None:
            data[FIELD_ATTRIBUTES_KEY] = to_wire(self.children)
        return data


SchemaTree = Tuple[FieldSpec, ...]


def parse(raw: Any) -> SchemaTree:
    """
    Build a SchemaTree from its raw wire description.

    Args:
        raw: The ordered field array, or a configuration document
             holding it under "field_attributes".

    Returns:
        The root level of the schema.

    Raises:
        SchemaError: On a missing name/type, an unknown type string,
                     a customobject without nested fields, or a
                     duplicate name within one level.
    """
    if isinstance(raw, dict):
        if FIELD_ATTRIBUTES_KEY not in raw:
            raise SchemaError(f"Schema document has no '{FIELD_ATTRIBUTES_KEY}' array")
        raw = raw[FIELD_ATTRIBUTES_KEY]
    return _parse_level(raw, path="")


def _parse_level(raw_fields: Any, path: str) -> SchemaTree:
    if not isinstance(raw_fields, list):
        where = f" for '{path}'" if path else ""
        raise SchemaError(f"Expected an array of field descriptions{where}")

    fields: List[FieldSpec] = []
    seen = set()
    for entry in raw_fields:
        spec = _parse_field(entry, path)
        if spec.name in seen:
            raise SchemaError(f"Duplicate field name '{_join(path, spec.name)}'")
        seen.add(spec.name)
        fields.append(spec)
    return tuple(fields)


def _parse_field(entry: Any, path: str) -> FieldSpec:
    if not isinstance(entry, dict):
        raise SchemaError(f"Field description under '{path or '<root>'}' must be an object")

    name = entry.get("name")
    if name is None or name == "":
        raise SchemaError(f"Field description under '{path or '<root>'}' has no name")
    if not isinstance(name, str):
        raise SchemaError(f"Field name {name!r} under '{path or '<root>'}' must be a string")

    full_name = _join(path, name)
    raw_type = entry.get("type")
    if raw_type is None or raw_type == "":
        raise SchemaError(f"Field '{full_name}' has no type")

    tag = TypeTag.from_wire(raw_type)
    if tag is None:
        raise SchemaError(f"Field '{full_name}' has unknown type '{raw_type}'")

    if tag.is_nested:
        if FIELD_ATTRIBUTES_KEY not in entry:
            raise SchemaError(f"Field '{full_name}' is a customobject without '{FIELD_ATTRIBUTES_KEY}'")
        children = _parse_level(entry[FIELD_ATTRIBUTES_KEY], full_name)
        return FieldSpec(name=name, type=tag, children=children)

    if FIELD_ATTRIBUTES_KEY in entry:
        raise SchemaError(f"Field '{full_name}' of type '{tag.wire_name}' cannot have '{FIELD_ATTRIBUTES_KEY}'")
    return FieldSpec(name=name, type=tag)


def _join(prefix: str, name: str) -> str:
    if not prefix:
        return name
    return f"{prefix}.{name}"


def to_wire(schema: SchemaTree) -> List[Dict[str, Any]]:
    """Render a SchemaTree back into the wire array."""
    return [spec.to_wire() for spec in schema]
