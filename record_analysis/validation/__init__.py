# ==============================================
# TOPIC 2: VALIDATION
# ==============================================
#
# This package checks a submitted record against its registered
# schema before anything is stored.
#
# Modules:
# --------
# - outcome.py    → ValidationOutcome (bad / missing / extra counts)
# - validator.py  → Recursive schema-driven Validator
#
# ==============================================

from .outcome import ValidationOutcome
from .validator import Validator, validate

__all__ = ["ValidationOutcome", "Validator", "validate"]
