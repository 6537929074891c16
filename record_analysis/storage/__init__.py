# ==============================================
# TOPIC 4: STORAGE (MongoDB)
# ==============================================
#
# This package handles all database operations: one shared
# connection and the three stores built on top of it.
#
# Modules:
# --------
# - mongo_client.py  → MongoDB connection and document operations
# - stores.py        → SchemaStore, RecordStore, AnalysisStore
#
# ==============================================

from .mongo_client import MongoClient
from .stores import SchemaStore, RecordStore, AnalysisStore, to_storable

__all__ = [
    "MongoClient",
    "SchemaStore",
    "RecordStore",
    "AnalysisStore",
    "to_storable",
]
