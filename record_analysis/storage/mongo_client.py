# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection and the handful of document
#   operations the stores need. One instance per process; stores
#   receive it at startup instead of opening their own handles.
#
# CLASS: MongoClient
# ------------------
#   Stateful - holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None, uri=None)
#
#   Methods:
#   --------
#   - connect() -> None
#   - disconnect() -> None
#   - insert_one(collection_name, document) -> inserted_id
#   - find(collection_name, query) -> list[dict]
#   - find_one(collection_name, query) -> dict | None
#   - replace_one(collection_name, query, document, upsert=False) -> int
#   - count(collection_name, query) -> int
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoClient(...) as db:` usage.
#
# ==============================================

from typing import Any, Dict, List, Optional

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure

from record_analysis.config import MongoConfig
from record_analysis.log import get_logger

logger = get_logger("storage.mongo")


class MongoClient:
    def __init__(self, host="localhost", port=27017, database="development", user=None, password=None, uri=None):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.uri = uri
        self.client = None  # Will hold the actual MongoDB client connection

    @classmethod
    def from_config(cls, config: MongoConfig) -> "MongoClient":
        return cls(
            host=config.host,
            port=config.port,
            database=config.database,
            user=config.user,
            password=config.password,
            uri=config.uri,
        )

    def _build_uri(self) -> str:
        if self.uri:
            return self.uri
        if self.user and self.password:
            return f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
        return f"mongodb://{self.host}:{self.port}/{self.database}"

    def connect(self):
        # Establish connection to MongoDB. No-op when already connected.
        if self.client is not None:
            return
        try:
            self.client = PyMongoClient(self._build_uri())
            # Test connection
            self.client.admin.command('ping')
            logger.info("Connected to MongoDB database '%s'", self.database)
        except ConnectionFailure as e:
            logger.error("Could not connect to MongoDB: %s", e)
            self.client = None
            raise
        except OperationFailure as e:
            logger.error("Authentication failed: %s", e)
            self.client = None
            raise

    def disconnect(self):
        # Close connection.
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB.")
            self.client = None

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    def _collection(self, collection_name: str):
        if not self.client:
            raise RuntimeError("Not connected to MongoDB.")
        return self.client[self.database][collection_name]

    def insert_one(self, collection_name: str, document: Dict[str, Any]) -> Any:
        # Insert single document. Return inserted_id.
        # pymongo adds "_id" to the dict it is given, so hand it a copy.
        result = self._collection(collection_name).insert_one(dict(document))
        logger.debug("Inserted document %s into '%s'", result.inserted_id, collection_name)
        return result.inserted_id

    def find(self, collection_name: str, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        # Query documents matching filter, in natural (insertion) order.
        return list(self._collection(collection_name).find(query))

    def find_one(self, collection_name: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._collection(collection_name).find_one(query)

    def replace_one(
        self,
        collection_name: str,
        query: Dict[str, Any],
        document: Dict[str, Any],
        upsert: bool = False
    ) -> int:
        """
        Replace the document matching query.

        Returns:
            Number of documents matched (0 or 1); an upsert that
            inserts counts as 1.
        """
        result = self._collection(collection_name).replace_one(query, document, upsert=upsert)
        if result.upserted_id is not None:
            return 1
        return result.matched_count

    def count(self, collection_name: str, query: Dict[str, Any]) -> int:
        return self._collection(collection_name).count_documents(query)

    def __enter__(self):
        # For `with MongoClient(...) as db:` usage.
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
