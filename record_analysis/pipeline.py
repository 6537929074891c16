"""
==============================================
Streaming Submitter
==============================================

Pulls records from an HTTP data source and submits each one to a
registered schema through RecordAnalysisService.

USAGE EXAMPLES:

1. Stream 100 records into schema "classrooms":
    from record_analysis.pipeline import StreamingSubmitter

    with StreamingSubmitter("classrooms") as submitter:
        summary = submitter.start_streaming(max_records=100)

2. Submit an in-memory batch:
    submitter = StreamingSubmitter("classrooms")
    submitter.process_batch([
        {"classroomName": "Duncan Hall 1072", "classroomLimit": 65, ...},
    ])
"""

import time
from typing import Any, Dict, List, Optional

import requests

from record_analysis.config import AppConfig, get_config
from record_analysis.errors import InvalidInput
from record_analysis.log import get_logger
from record_analysis.service import RecordAnalysisService

logger = get_logger("pipeline")


class StreamingSubmitter:
    """
    Feeds records from the configured data stream into one schema.
    """

    def __init__(
        self,
        schema_id: str,
        config: Optional[AppConfig] = None,
        service: Optional[RecordAnalysisService] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            schema_id: Schema every fetched record is submitted under
            config: Optional configuration. If None, loads from environment.
            service: Optional service (shares its stores and connection).
            session: Optional requests session used for fetching.
        """
        self._schema_id = schema_id
        self._config = config or get_config()
        self._service = service or RecordAnalysisService(self._config)
        self._session = session or requests.Session()
        self._is_running = False
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._fetched = 0
        self._accepted = 0
        self._rejected = 0
        self._errors = 0

    def start_streaming(
        self,
        max_records: Optional[int] = None,
        interval_seconds: float = 0.1
    ) -> dict:
        """
        Fetch and submit records until max_records is reached or stopped.

        Args:
            max_records: Maximum records to fetch (None = indefinite)
            interval_seconds: Delay between fetches

        Returns:
            Summary statistics
        """
        logger.info("Starting stream from %s into '%s'", self._config.data_stream_url, self._schema_id)

        self._is_running = True
        self._reset_counters()
        start_time = time.time()

        try:
            while self._is_running:
                if max_records and self._fetched >= max_records:
                    logger.info("Reached target of %d records", max_records)
                    break

                record = self._fetch_record()
                if record is not None:
                    self._fetched += 1
                    self._submit(record)

                    if self._fetched % 10 == 0:
                        logger.info("Fetched %d records (%d accepted, %d rejected)",
                                    self._fetched, self._accepted, self._rejected)

                time.sleep(interval_seconds)

        except KeyboardInterrupt:
            logger.warning("Interrupted by user")
        finally:
            self._is_running = False

        return self._summary(time.time() - start_time)

    def stop_streaming(self) -> None:
        """Stop the streaming loop after the current record."""
        self._is_running = False

    def process_batch(self, records: List[Dict[str, Any]]) -> dict:
        """
        Submit a batch of already-fetched records.

        Returns:
            Summary statistics
        """
        self._reset_counters()
        start_time = time.time()
        for record in records:
            self._fetched += 1
            self._submit(record)
        return self._summary(time.time() - start_time)

    def _submit(self, record: Any) -> None:
        try:
            result = self._service.submit_record(self._schema_id, record)
        except InvalidInput as e:
            self._errors += 1
            logger.warning("Skipped malformed record: %s", e)
            return

        if result.accepted:
            self._accepted += 1
        else:
            self._rejected += 1

    def _fetch_record(self) -> Optional[Any]:
        """
        Fetch a single record from the data stream.

        Returns:
            Decoded JSON body, or None on error
        """
        try:
            response = self._session.get(self._config.data_stream_url, timeout=5)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            self._errors += 1
            logger.warning("Failed to fetch record: %s", e)
            return None
        except ValueError as e:
            # Body was not JSON
            self._errors += 1
            logger.warning("Data stream returned a non-JSON body: %s", e)
            return None

    def _summary(self, elapsed: float) -> dict:
        return {
            "schema_id": self._schema_id,
            "records_fetched": self._fetched,
            "records_accepted": self._accepted,
            "records_rejected": self._rejected,
            "errors": self._errors,
            "elapsed_seconds": round(elapsed, 2),
            "records_per_second": round(self._fetched / elapsed, 2) if elapsed > 0 else 0,
        }

    def close(self) -> None:
        self._session.close()
        self._service.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
