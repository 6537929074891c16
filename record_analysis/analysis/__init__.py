# ==============================================
# TOPIC 3: ANALYSIS
# ==============================================
#
# This package keeps schema-shaped running statistics over the
# records accepted for each schema.
#
# Modules:
# --------
# - statistics_tree.py    → StatisticsNode: one node per schema field
# - statistics_engine.py  → Initialize / incremental update / batch recompute
# - analysis_record.py    → Per-schema AnalysisRecord with failure tallies
#
# ==============================================

from .statistics_tree import StatisticsNode, StatisticsTree
from .statistics_engine import StatisticsEngine
from .analysis_record import AnalysisRecord

__all__ = [
    "StatisticsNode",
    "StatisticsTree",
    "StatisticsEngine",
    "AnalysisRecord",
]
