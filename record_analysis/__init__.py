# ==============================================
# Record Analysis Framework
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# record_analysis/
# ├── schema/           # Topic 1: Type tags, type resolution, schema trees
# ├── validation/       # Topic 2: Validate records against a schema
# ├── analysis/         # Topic 3: Schema-shaped running statistics
# ├── storage/          # Topic 4: MongoDB-backed schema/record/analysis stores
# ├── config.py         # Configuration management
# ├── errors.py         # Error taxonomy
# ├── log.py            # Logger setup
# ├── service.py        # Final orchestrator class
# ├── pipeline.py       # Streaming submitter (HTTP data source)
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
