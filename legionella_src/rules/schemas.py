"""Schemas for the Legionella UFC rules engine.

This module defines:
- Measured / Interfered: the reading of one counting channel
- SampleInput: the three readings of one sample type
- SampleResult: output of the rules engine for one sample type
- SampleReport: results collected over a whole sample set

A channel is either a measured colony count or unusable because interfering
flora overgrew the plate. The legacy calculator encoded the latter as the
count ``-1``; ``SampleInput.from_counts`` still accepts that encoding.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

from .ufc_criteria import INTERFERENCE_SENTINEL


class ValidationError(ValueError):
    """Raised when a count is outside the domain the rules are defined on."""


class Channel(str, Enum):
    """Counting channels of a sample type, keyed as on the bench sheet."""
    DIRECT = "d"               # Direct plate
    FILTRATE_10ML = "n_1"      # 10 ml filtration
    FILTRATE_100ML = "n_2"     # 100 ml filtration


class OutcomeKind(str, Enum):
    """What kind of interpretation the rules engine produced."""
    CONCENTRATION = "concentration"    # Numeric UFC/L estimate
    QUALITATIVE = "qualitative"        # Detection limit or saturation bound
    WARNING = "warning"                # Improbable combination, analysis advised
    INTERFERENCE = "interference"      # Statement about interfering flora
    UNCLASSIFIED = "unclassified"      # No rule covers the counts


# ============================================================================
# Channel Readings
# ============================================================================

@dataclass(frozen=True)
class Measured:
    """A usable colony count."""
    count: float

    def __post_init__(self):
        count = self.count
        if isinstance(count, bool) or not isinstance(count, (int, float)):
            raise ValidationError(f"Colony count must be a number, got {count!r}")
        if not math.isfinite(count):
            raise ValidationError(f"Colony count must be finite, got {count!r}")
        if count < 0:
            raise ValidationError(f"Colony count cannot be negative, got {count!r}")

    def __str__(self) -> str:
        return f"{self.count:g}"


@dataclass(frozen=True)
class Interfered:
    """A channel made unreadable by interfering flora."""

    def __str__(self) -> str:
        return "interfered"


INTERFERED = Interfered()

Reading = Measured | Interfered


def reading_from_count(value) -> Reading:
    """Convert a legacy count (``-1`` = interfered) to a reading."""
    if isinstance(value, (Measured, Interfered)):
        return value
    if not isinstance(value, bool) and isinstance(value, (int, float)) and value == INTERFERENCE_SENTINEL:
        return INTERFERED
    return Measured(value)


def reading_to_count(reading: Reading) -> float:
    """Convert a reading back to the legacy count encoding."""
    if isinstance(reading, Interfered):
        return INTERFERENCE_SENTINEL
    return reading.count


# ============================================================================
# Engine Input / Output
# ============================================================================

@dataclass(frozen=True)
class SampleInput:
    """The three readings taken for one sample type."""
    direct: Reading
    filtrate_10ml: Reading
    filtrate_100ml: Reading

    def __post_init__(self):
        for name in ("direct", "filtrate_10ml", "filtrate_100ml"):
            if not isinstance(getattr(self, name), (Measured, Interfered)):
                raise ValidationError(
                    f"{name} must be Measured or Interfered, got {getattr(self, name)!r}"
                )

    @classmethod
    def from_counts(cls, d, n1, n2) -> "SampleInput":
        """Build an input from plain counts, ``-1`` marking interference.

        Raises:
            ValidationError: For negative counts other than ``-1`` and for
                non-numeric or non-finite values
        """
        return cls(
            direct=reading_from_count(d),
            filtrate_10ml=reading_from_count(n1),
            filtrate_100ml=reading_from_count(n2),
        )

    @property
    def readings(self) -> tuple[Reading, Reading, Reading]:
        return (self.direct, self.filtrate_10ml, self.filtrate_100ml)

    @property
    def interference_detected(self) -> bool:
        """True if any channel is interfered."""
        return any(isinstance(r, Interfered) for r in self.readings)

    @property
    def has_positive_count(self) -> bool:
        """True if at least one measured channel counted colonies."""
        return any(isinstance(r, Measured) and r.count > 0 for r in self.readings)

    def to_counts(self) -> tuple[float, float, float]:
        """Legacy ``(d, n1, n2)`` triple with ``-1`` for interfered channels."""
        return tuple(reading_to_count(r) for r in self.readings)

    def to_dict(self) -> dict:
        d, n1, n2 = self.to_counts()
        return {
            Channel.DIRECT.value: d,
            Channel.FILTRATE_10ML.value: n1,
            Channel.FILTRATE_100ML.value: n2,
        }


@dataclass(frozen=True)
class SampleResult:
    """Interpretation of one sample type.

    ``concentration`` is set only for numeric outcomes and holds the
    unrounded UFC/L value; the message then shows ``rounded_concentration``.
    """
    message: str
    kind: OutcomeKind
    interference_detected: bool
    concentration: float | None = None
    rounded_concentration: float | None = None
    rule: str | None = None  # Name of the rule that matched

    def __post_init__(self):
        if (self.concentration is not None) != (self.kind == OutcomeKind.CONCENTRATION):
            raise ValueError(
                f"Result kind {self.kind.value} inconsistent with concentration "
                f"{self.concentration!r}"
            )

    @property
    def is_numeric(self) -> bool:
        return self.concentration is not None

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "kind": self.kind.value,
            "interference_detected": self.interference_detected,
            "concentration": self.concentration,
            "rounded_concentration": self.rounded_concentration,
            "rule": self.rule,
        }


@dataclass
class SampleReport:
    """Results for a whole sample set, in the caller's display order."""
    results: dict[str, SampleResult] = field(default_factory=dict)
    interference_detected: bool = False
    omitted: list[str] = field(default_factory=list)  # Types with nothing to report

    def to_dict(self) -> dict:
        return {
            "results": {
                sample_type: result.to_dict()
                for sample_type, result in self.results.items()
            },
            "interference_detected": self.interference_detected,
            "omitted": list(self.omitted),
        }
