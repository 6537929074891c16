# ==============================================
# CLI - Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to the service.
#
# COMMANDS:
# ---------
# 1. Register a schema from a JSON file:
#    python -m record_analysis.cli register classrooms schema.json
#
# 2. Submit one record (JSON object) or several (JSON array):
#    python -m record_analysis.cli submit classrooms record.json
#
# 3. Show the analysis, optionally recomputed from stored records:
#    python -m record_analysis.cli analysis classrooms --recompute
#
# 4. Show the registered schema:
#    python -m record_analysis.cli schema classrooms
#
# 5. Stream records from DATA_STREAM_URL:
#    python -m record_analysis.cli stream classrooms --count 100
#
# Output is JSON on stdout. A rejected request exits with status 1.
#
# ==============================================

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from record_analysis.config import get_config
from record_analysis.errors import RecordAnalysisError
from record_analysis.log import configure_logging, get_logger
from record_analysis.pipeline import StreamingSubmitter
from record_analysis.service import RecordAnalysisService

logger = get_logger("cli")


def _load_json(path: str) -> Any:
    with open(Path(path), "r") as f:
        return json.load(f)


def _print(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="record_analysis",
        description="Schema-driven record validation and statistics"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Register a schema")
    register.add_argument("schema_id")
    register.add_argument("file", help="JSON file with the field array")

    submit = sub.add_parser("submit", help="Submit records to a schema")
    submit.add_argument("schema_id")
    submit.add_argument("file", help="JSON file with one record or an array of records")

    analysis = sub.add_parser("analysis", help="Show the analysis for a schema")
    analysis.add_argument("schema_id")
    analysis.add_argument("--recompute", action="store_true",
                          help="Rebuild statistics from every stored record")

    schema = sub.add_parser("schema", help="Show a registered schema")
    schema.add_argument("schema_id")

    stream = sub.add_parser("stream", help="Submit records pulled from DATA_STREAM_URL")
    stream.add_argument("schema_id")
    stream.add_argument("--count", type=int, default=None)
    stream.add_argument("--interval", type=float, default=0.1)

    return parser


def run(args: argparse.Namespace, service: RecordAnalysisService) -> Any:
    if args.command == "register":
        return service.register_schema(args.schema_id, _load_json(args.file))

    if args.command == "submit":
        payload = _load_json(args.file)
        records: List[Any] = payload if isinstance(payload, list) else [payload]
        return [r.to_dict() for r in service.submit_batch(args.schema_id, records)]

    if args.command == "analysis":
        return service.fetch_analysis(args.schema_id, recompute=args.recompute or None)

    if args.command == "schema":
        return service.get_schema(args.schema_id)

    if args.command == "stream":
        submitter = StreamingSubmitter(args.schema_id, service=service)
        return submitter.start_streaming(max_records=args.count, interval_seconds=args.interval)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(config.log_level)

    with RecordAnalysisService(config) as service:
        try:
            _print(run(args, service))
        except RecordAnalysisError as e:
            logger.error("%s rejected: %s", args.command, e)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
