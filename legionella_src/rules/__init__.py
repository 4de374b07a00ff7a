"""Legionella UFC rules engine.

This module provides deterministic interpretation of Legionella plate counts
from water samples. The rules engine takes the readings of the direct plate
and of the 10 ml / 100 ml filtrations and applies the laboratory decision
tables to produce a concentration or a qualitative statement.

Architecture:
    Raw counts → SampleInput → Rules Engine → SampleResult

Readings are either a measured colony count or interfered (plate overgrown
by interfering flora); interfered readings select a separate decision table.
"""

from .schemas import (
    ValidationError,
    Channel,
    OutcomeKind,
    Measured,
    Interfered,
    INTERFERED,
    Reading,
    SampleInput,
    SampleResult,
    SampleReport,
)
from .rounding import round_significant, format_ufc
from .ufc_engine import (
    Rule,
    COUNT_RULES,
    INTERFERENCE_RULES,
    UFCRulesEngine,
    interpret,
)

__all__ = [
    # Schemas
    "ValidationError",
    "Channel",
    "OutcomeKind",
    "Measured",
    "Interfered",
    "INTERFERED",
    "Reading",
    "SampleInput",
    "SampleResult",
    "SampleReport",
    # Rounding
    "round_significant",
    "format_ufc",
    # Engine
    "Rule",
    "COUNT_RULES",
    "INTERFERENCE_RULES",
    "UFCRulesEngine",
    "interpret",
]
