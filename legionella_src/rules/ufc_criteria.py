"""Legionella counting criteria, reference values and message texts.

This module holds the constants used to interpret Legionella plate counts
from water samples: the per-channel multiplication factors, the saturation
limits of each reading, and the fixed message texts. The rule tables in
``ufc_engine`` are written against these values only.

Three readings are taken per sample type:
- direct: colonies counted on the direct plate (1 colony = 5 000 UFC/L)
- filtrate 10 ml: colonies after filtration of 10 ml (1 colony = 100 UFC/L)
- filtrate 100 ml: colonies after filtration of 100 ml (1 colony = 10 UFC/L)
"""

# =============================================================================
# Channel Factors (UFC/L per counted colony)
# =============================================================================

DIRECT_FACTOR = 5000
FILTRATE_10ML_FACTOR = 100
FILTRATE_100ML_FACTOR = 10

# Combined filtration: colonies of both filtrates over the 110 ml filtered
COMBINED_FILTRATION_FACTOR = 1000
COMBINED_FILTRATION_VOLUME_ML = 110


# =============================================================================
# Count Limits
# =============================================================================

# Above this count a filtration membrane is saturated
FILTRATE_SATURATION_COUNT = 100

# Below this count the 10 ml filtration is a low count
FILTRATE_10ML_LOW_COUNT = 10

# Direct counts of 1-2 colonies are read with the filtrations
DIRECT_LOW_COUNT_MAX = 2

# Above this count the direct plate is saturated
DIRECT_SATURATION_COUNT = 150

# Direct estimate above which a saturated 10 ml filtration is overridden
FILTRATE_10ML_SATURATION_UFC = 10000

# Legacy encoding of an interfered channel
INTERFERENCE_SENTINEL = -1

# Significant digits kept in reported concentrations
SIGNIFICANT_DIGITS = 2


# =============================================================================
# Message Texts
# =============================================================================

UNIT = "UFC/L"

BELOW_DETECTION_MESSAGE = "<10 UFC/L"
FILTRATE_100ML_SATURATED_MESSAGE = ">1 000 UFC/L"
FILTRATE_10ML_SATURATED_MESSAGE = ">10 000 UFC/L"
DIRECT_SATURATED_MESSAGE = ">750 000 UFC/L"

WARNING_PREFIX = (
    "Improbable case. Root-cause analysis of this result is recommended ("
)

INTERFERENCE_PREVENTS_DETECTION_MESSAGE = (
    "Presence of interfering flora prevents detection of Legionella."
)
THRESHOLD_RAISED_TEMPLATE = (
    "Presence of interfering flora raises the Legionella detection threshold "
    "to {threshold} UFC/L. Legionella not detected."
)
NOT_DETECTED_MESSAGE = "Legionella not detected."

INTERFERENCE_NOTICE = "Presence of interfering flora may impact the results."

UNCLASSIFIED_TEMPLATE = (
    "Unclassified case (d={d}, n_1={n1}, n_2={n2}): "
    "no interpretation rule covers these counts."
)
UNCLASSIFIED_INTERFERENCE_TEMPLATE = (
    "Unclassified interference case (d={d}, n_1={n1}, n_2={n2}): "
    "no interpretation rule covers these counts."
)

CONCENTRATION_TEMPLATE = "Concentration : {value} UFC/L"


# =============================================================================
# Formulas
# =============================================================================

def direct_ufc(d: float) -> float:
    """Concentration estimated from the direct plate."""
    return d * DIRECT_FACTOR


def filtrate_10ml_ufc(n1: float) -> float:
    """Concentration estimated from the 10 ml filtration."""
    return n1 * FILTRATE_10ML_FACTOR


def filtrate_100ml_ufc(n2: float) -> float:
    """Concentration estimated from the 100 ml filtration."""
    return n2 * FILTRATE_100ML_FACTOR


def combined_filtration_ufc(n1: float, n2: float) -> float:
    """Concentration from both filtrations pooled over 110 ml.

    Evaluated as ``(n1 + n2) * 1000 / 110`` in that order so results match
    the published calculator to the last bit.
    """
    return (n1 + n2) * COMBINED_FILTRATION_FACTOR / COMBINED_FILTRATION_VOLUME_ML


def threshold_raised_message(threshold: int) -> str:
    """Non-detection message for a detection threshold raised by interference."""
    return THRESHOLD_RAISED_TEMPLATE.format(threshold=f"{threshold:,}".replace(",", " "))


def is_filtrate_saturated(count: float) -> bool:
    """Check if a filtration count is beyond what the membrane can resolve."""
    return count > FILTRATE_SATURATION_COUNT


def is_direct_saturated(count: float) -> bool:
    """Check if a direct plate count is beyond what the plate can resolve."""
    return count > DIRECT_SATURATION_COUNT
