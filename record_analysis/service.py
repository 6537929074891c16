# ==============================================
# RecordAnalysisService - Final Orchestrator
# ==============================================
#
# PURPOSE:
#   The class callers interact with. Ties the 4 topics together
#   behind the three request kinds: register a schema, submit a
#   record, fetch the analysis.
#
# HOW IT CONNECTS THE 4 TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                  RecordAnalysisService                   │
#   │                                                          │
#   │  register_schema ──► TOPIC 1: parse() ──► SchemaStore     │
#   │                      TOPIC 3: initialize() ► AnalysisStore│
#   │                                                          │
#   │  submit_record ────► TOPIC 2: Validator.validate()        │
#   │                        │ clean          │ not clean       │
#   │                        ▼                ▼                 │
#   │          TOPIC 3: update()      with_rejection()          │
#   │          RecordStore.insert()          │                  │
#   │                        └──────┬────────┘                  │
#   │                               ▼                           │
#   │                     AnalysisStore.save()                  │
#   │                                                          │
#   │  fetch_analysis ───► AnalysisStore.get()                  │
#   │                      (optional TOPIC 3: recompute() over  │
#   │                       RecordStore.scan())                 │
#   └──────────────────────────────────────────────────────────┘
#
# WRITE ORDERING:
#   The new AnalysisRecord is computed in full before anything is
#   written, so an InternalInconsistency leaves both stores as they
#   were. The record insert and the analysis replace are two separate
#   writes with no transaction around them: if the second fails after
#   the first succeeds, the record is stored but not yet counted
#   until the next batch recompute.
#
#   Submits for the same schema id are a read-modify-write on its
#   AnalysisRecord. Callers that submit concurrently for one id must
#   serialize those submits themselves.
#
# ==============================================

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from record_analysis.analysis import AnalysisRecord, StatisticsEngine
from record_analysis.config import AppConfig, get_config
from record_analysis.errors import InternalInconsistency, InvalidInput, UnknownSchema
from record_analysis.log import get_logger
from record_analysis.schema import SchemaTree, TypeResolver, parse, to_wire
from record_analysis.storage import AnalysisStore, MongoClient, RecordStore, SchemaStore
from record_analysis.validation import ValidationOutcome, Validator

logger = get_logger("service")


@dataclass
class SubmitResult:
    schema_id: str
    accepted: bool
    outcome: ValidationOutcome = field(default_factory=ValidationOutcome)
    record_id: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_id": self.schema_id,
            "accepted": self.accepted,
            **self.outcome.to_dict(),
            "record_id": str(self.record_id) if self.record_id is not None else None,
        }


class RecordAnalysisService:
    """
    Registers schemas, validates and stores records, reports statistics.

    Stores can be injected (tests, alternative backends). When they are
    not, one MongoClient is built from the configuration and shared by
    all three; it connects on first use and is closed by close().
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        schema_store: Optional[SchemaStore] = None,
        record_store: Optional[RecordStore] = None,
        analysis_store: Optional[AnalysisStore] = None,
        mongo_client: Optional[MongoClient] = None,
    ):
        """
        Args:
            config: Application configuration. If None, loads from environment.
            schema_store / record_store / analysis_store: Optional collaborators.
            mongo_client: Optional shared client for the default stores.
        """
        self._config = config or get_config()

        # TOPIC 1 + 2: Schema and validation
        self._type_resolver = TypeResolver()
        self._validator = Validator(self._type_resolver)

        # TOPIC 3: Analysis
        self._engine = StatisticsEngine()

        # TOPIC 4: Storage
        if mongo_client is None and None in (schema_store, record_store, analysis_store):
            mongo_client = MongoClient.from_config(self._config.mongo)
        self._mongo_client = mongo_client
        self._schema_store = schema_store or SchemaStore(
            mongo_client, self._config.mongo.configuration_collection
        )
        self._record_store = record_store or RecordStore(mongo_client)
        self._analysis_store = analysis_store or AnalysisStore(
            mongo_client, self._config.mongo.analysis_collection
        )

    # ======================================
    # Register schema
    # ======================================
    def register_schema(self, schema_id: str, raw_schema: Any) -> Dict[str, Any]:
        """
        Parse and store a schema and create its zeroed analysis.

        Args:
            schema_id: Identifier records will be submitted under
            raw_schema: Field array, or {"field_attributes": [...]}

        Returns:
            The initial analysis report.

        Raises:
            InvalidInput: Bad identifier, or the id is already registered.
            SchemaError: The description cannot be parsed.
        """
        self._require_id(schema_id)
        self._connect()

        schema = parse(raw_schema)
        if self._schema_store.exists(schema_id):
            raise InvalidInput(f"A schema is already registered for id '{schema_id}'")

        analysis = AnalysisRecord(id=schema_id, statistics=self._engine.initialize(schema))

        self._schema_store.save(schema_id, schema)
        self._analysis_store.save(analysis)
        logger.info("Registered schema '%s' with %d top-level fields", schema_id, len(schema))
        return analysis.to_report()

    def get_schema(self, schema_id: str) -> List[Dict[str, Any]]:
        """Return the registered schema in wire format."""
        self._require_id(schema_id)
        self._connect()
        return to_wire(self._load_schema(schema_id))

    # ======================================
    # Submit record
    # ======================================
    def submit_record(self, schema_id: str, record: Any) -> SubmitResult:
        """
        Validate one record and fold it into the analysis.

        A clean record is stored and its numeric fields update the
        statistics. Any other record is rejected; each failure kind it
        shows bumps the matching aggregate counter by one.

        Raises:
            InvalidInput: The record is not an object.
            UnknownSchema: Nothing is registered under schema_id.
            InternalInconsistency: Statistics could not absorb a validated
                record. Nothing is written.
        """
        self._require_id(schema_id)
        if not isinstance(record, Mapping):
            raise InvalidInput(f"Record must be an object, got {type(record).__name__}")
        self._connect()

        schema = self._load_schema(schema_id)
        analysis = self._load_analysis(schema_id)

        outcome = self._validator.validate(schema, record)

        if not outcome.is_clean:
            self._analysis_store.save(analysis.with_rejection(outcome))
            logger.warning(
                "Rejected record for '%s' (bad=%d, missing=%d, extra=%d)",
                schema_id,
                outcome.bad_value_count,
                outcome.missing_field_count,
                outcome.extra_field_count,
            )
            return SubmitResult(schema_id=schema_id, accepted=False, outcome=outcome)

        try:
            statistics = self._engine.update(analysis.statistics, record)
        except InternalInconsistency:
            logger.exception("Statistics update failed for validated record of '%s'", schema_id)
            raise

        record_id = self._record_store.insert(schema_id, dict(record))
        self._analysis_store.save(analysis.with_acceptance(statistics))
        logger.info("Accepted record %s for '%s'", record_id, schema_id)
        return SubmitResult(schema_id=schema_id, accepted=True, outcome=outcome, record_id=record_id)

    def submit_batch(self, schema_id: str, records: List[Any]) -> List[SubmitResult]:
        return [self.submit_record(schema_id, record) for record in records]

    # ======================================
    # Fetch analysis
    # ======================================
    def fetch_analysis(self, schema_id: str, recompute: Optional[bool] = None) -> Dict[str, Any]:
        """
        Return the analysis report for a schema.

        Args:
            schema_id: Registered identifier
            recompute: Rebuild statistics from every stored record before
                       reporting (and persist the result). Defaults to the
                       ANALYSIS_RECOMPUTE_ON_FETCH setting.

        Raises:
            UnknownSchema: Nothing is registered under schema_id.
        """
        self._require_id(schema_id)
        self._connect()
        if recompute is None:
            recompute = self._config.analysis.recompute_on_fetch

        analysis = self._load_analysis(schema_id)
        if recompute:
            schema = self._load_schema(schema_id)
            records = self._record_store.scan(schema_id)
            try:
                statistics = self._engine.recompute(schema, records)
            except InternalInconsistency:
                logger.exception("Batch recompute failed for '%s'", schema_id)
                raise
            analysis = replace(analysis, number_of_records=len(records), statistics=statistics)
            self._analysis_store.save(analysis)
            logger.info("Recomputed statistics for '%s' over %d records", schema_id, len(records))

        return analysis.to_report()

    # ======================================
    # Internals
    # ======================================
    def _require_id(self, schema_id: Any) -> None:
        # The id doubles as the name of its record collection
        if not isinstance(schema_id, str) or not schema_id.strip():
            raise InvalidInput("A non-empty schema id is required")
        if "$" in schema_id or "\0" in schema_id:
            raise InvalidInput(f"Schema id '{schema_id}' must not contain '$' or NUL")
        if schema_id.startswith("system."):
            raise InvalidInput(f"Schema id '{schema_id}' uses the reserved 'system.' prefix")
        reserved = (
            self._config.mongo.configuration_collection,
            self._config.mongo.analysis_collection,
        )
        if schema_id in reserved:
            raise InvalidInput(f"Schema id '{schema_id}' is reserved for an internal collection")

    def _connect(self) -> None:
        if self._mongo_client is not None:
            self._mongo_client.connect()

    def _load_schema(self, schema_id: str) -> SchemaTree:
        schema = self._schema_store.get(schema_id)
        if schema is None:
            raise UnknownSchema(schema_id)
        return schema

    def _load_analysis(self, schema_id: str) -> AnalysisRecord:
        analysis = self._analysis_store.get(schema_id)
        if analysis is None:
            raise UnknownSchema(schema_id)
        return analysis

    def close(self) -> None:
        if self._mongo_client is not None:
            self._mongo_client.disconnect()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
