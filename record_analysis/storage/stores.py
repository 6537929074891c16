# ==============================================
# Stores
# ==============================================
#
# PURPOSE:
#   The three collaborators the service talks to, each a thin
#   layer over one shared MongoClient:
#
#   - SchemaStore    → "configurations" collection, one document per
#                      schema id: {_id, field_attributes: [...]}
#   - RecordStore    → one collection per schema id holding every
#                      accepted record
#   - AnalysisStore  → "analysis" collection, one AnalysisRecord per
#                      schema id
#
#   None of them open connections; the MongoClient is connected and
#   closed by whoever owns it.
#
#   RecordStore converts decimal.Decimal values to bson.Decimal128 on
#   the way in; the BSON encoder has no mapping for Decimal.
#
# ==============================================

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, List, Optional

from bson import Decimal128

from record_analysis.analysis import AnalysisRecord
from record_analysis.schema import SchemaTree, parse, to_wire
from record_analysis.schema.schema_tree import FIELD_ATTRIBUTES_KEY


class SchemaStore:
    def __init__(self, mongo_client, collection_name: str = "configurations"):
        self.mongo_client = mongo_client
        self.collection_name = collection_name

    def exists(self, schema_id: str) -> bool:
        return self.mongo_client.find_one(self.collection_name, {"_id": schema_id}) is not None

    def get(self, schema_id: str) -> Optional[SchemaTree]:
        """Fetch and parse the schema registered under schema_id, or None."""
        document = self.mongo_client.find_one(self.collection_name, {"_id": schema_id})
        if document is None:
            return None
        return parse(document)

    def save(self, schema_id: str, schema: SchemaTree) -> None:
        self.mongo_client.insert_one(
            self.collection_name,
            {"_id": schema_id, FIELD_ATTRIBUTES_KEY: to_wire(schema)}
        )


class RecordStore:
    def __init__(self, mongo_client):
        self.mongo_client = mongo_client

    def insert(self, schema_id: str, record: Dict[str, Any]) -> Any:
        return self.mongo_client.insert_one(schema_id, to_storable(record))

    def scan(self, schema_id: str) -> List[Dict[str, Any]]:
        # Every accepted record for the schema, "_id" included
        return self.mongo_client.find(schema_id, {})

    def count(self, schema_id: str) -> int:
        return self.mongo_client.count(schema_id, {})


class AnalysisStore:
    def __init__(self, mongo_client, collection_name: str = "analysis"):
        self.mongo_client = mongo_client
        self.collection_name = collection_name

    def get(self, schema_id: str) -> Optional[AnalysisRecord]:
        document = self.mongo_client.find_one(self.collection_name, {"_id": schema_id})
        if document is None:
            return None
        return AnalysisRecord.from_dict(document)

    def save(self, analysis: AnalysisRecord) -> None:
        # Whole-document replace; concurrent submits for one id are not serialized here
        self.mongo_client.replace_one(
            self.collection_name,
            {"_id": analysis.id},
            analysis.to_dict(),
            upsert=True
        )


def to_storable(value: Any) -> Any:
    """
    Return a copy of a validated value the BSON encoder accepts.

    Nested mappings are copied level by level; Decimal becomes
    Decimal128. Everything else is returned as is.
    """
    if isinstance(value, Mapping):
        return {key: to_storable(item) for key, item in value.items()}
    if isinstance(value, Decimal):
        return Decimal128(value)
    return value
