"""
Error taxonomy for schema registration, record submission and analysis.

A non-clean ValidationOutcome is not an error: it is reported back to the
caller in a SubmitResult. Everything here rejects the whole request.
"""


class RecordAnalysisError(Exception):
    """Base exception for the package."""


class InvalidInput(RecordAnalysisError, ValueError):
    """Raised when a record or request is malformed at the boundary."""


class SchemaError(InvalidInput):
    """Raised when a raw schema description cannot be parsed."""


class UnknownSchema(RecordAnalysisError, LookupError):
    """Raised when no schema is registered under the requested identifier."""

    def __init__(self, schema_id: str):
        super().__init__(f"No schema registered for id '{schema_id}'")
        self.schema_id = schema_id


class InternalInconsistency(RecordAnalysisError, RuntimeError):
    """Raised when a value contradicts an earlier type check. Always a defect."""
