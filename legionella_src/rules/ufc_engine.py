"""Legionella UFC Rules Engine.

Interprets the three plate readings of a sample type (direct, 10 ml
filtration, 100 ml filtration) into a concentration in UFC/L or a
qualitative statement.

The rules engine receives:
1. SampleInput - one reading per channel, each Measured(count) or Interfered

And produces:
- SampleResult with the outcome kind, message, concentration and the name
  of the rule that decided it

Decision Flow:
1. Are all three channels measured?
   -> Apply COUNT_RULES (keyed on the direct count, then on both filtrations)
2. Otherwise at least one channel is overgrown by interfering flora
   -> Apply INTERFERENCE_RULES in order, first match wins
3. No rule matched
   -> UNCLASSIFIED outcome (never a silent zero concentration)

Numeric outcomes are reported as "Concentration : <value> UFC/L" with the
value rounded to two significant digits. Warnings cite the unrounded value.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from .rounding import format_ufc, round_significant
from .schemas import (
    Interfered,
    Measured,
    OutcomeKind,
    Reading,
    SampleInput,
    SampleResult,
)
from .ufc_criteria import (
    BELOW_DETECTION_MESSAGE,
    CONCENTRATION_TEMPLATE,
    DIRECT_LOW_COUNT_MAX,
    DIRECT_SATURATED_MESSAGE,
    DIRECT_SATURATION_COUNT,
    FILTRATE_10ML_LOW_COUNT,
    FILTRATE_10ML_SATURATED_MESSAGE,
    FILTRATE_10ML_SATURATION_UFC,
    FILTRATE_100ML_SATURATED_MESSAGE,
    FILTRATE_SATURATION_COUNT,
    INTERFERENCE_PREVENTS_DETECTION_MESSAGE,
    NOT_DETECTED_MESSAGE,
    UNCLASSIFIED_INTERFERENCE_TEMPLATE,
    UNCLASSIFIED_TEMPLATE,
    UNIT,
    WARNING_PREFIX,
    combined_filtration_ufc,
    direct_ufc,
    filtrate_10ml_ufc,
    filtrate_100ml_ufc,
    is_direct_saturated,
    is_filtrate_saturated,
    threshold_raised_message,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[Reading], bool]


@dataclass(frozen=True)
class Outcome:
    """What a rule decided, before it is turned into a SampleResult."""
    kind: OutcomeKind
    value: float | None = None
    message: str | None = None


OutcomeFn = Callable[[float | None, float | None, float | None], Outcome]


@dataclass(frozen=True)
class Rule:
    """One row of a decision table: a predicate per channel and an outcome."""
    name: str
    direct: Predicate
    filtrate_10ml: Predicate
    filtrate_100ml: Predicate
    outcome: OutcomeFn

    def matches(self, sample: SampleInput) -> bool:
        return (
            self.direct(sample.direct)
            and self.filtrate_10ml(sample.filtrate_10ml)
            and self.filtrate_100ml(sample.filtrate_100ml)
        )


# ============================================================================
# Channel Predicates
# ============================================================================

def interfered(reading: Reading) -> bool:
    return isinstance(reading, Interfered)


def zero(reading: Reading) -> bool:
    return isinstance(reading, Measured) and reading.count == 0


def any_count(reading: Reading) -> bool:
    return isinstance(reading, Measured)


def between(low: float, high: float, include_high: bool = True) -> Predicate:
    """Measured count in ``[low, high]`` (or ``[low, high)``)."""
    def predicate(reading: Reading) -> bool:
        if not isinstance(reading, Measured):
            return False
        if include_high:
            return low <= reading.count <= high
        return low <= reading.count < high
    return predicate


def at_most(limit: float) -> Predicate:
    def predicate(reading: Reading) -> bool:
        return isinstance(reading, Measured) and reading.count <= limit
    return predicate


def filtrate_saturated(reading: Reading) -> bool:
    return isinstance(reading, Measured) and is_filtrate_saturated(reading.count)


def direct_saturated(reading: Reading) -> bool:
    return isinstance(reading, Measured) and is_direct_saturated(reading.count)


SAT = FILTRATE_SATURATION_COUNT
readable_filtrate = between(1, SAT)
low_10ml = between(1, FILTRATE_10ML_LOW_COUNT, include_high=False)
counted_10ml = between(FILTRATE_10ML_LOW_COUNT, SAT)
low_direct = between(1, DIRECT_LOW_COUNT_MAX)
counted_direct = between(DIRECT_LOW_COUNT_MAX + 1, DIRECT_SATURATION_COUNT)


# ============================================================================
# Formulas over (d, n1, n2)
# ============================================================================

def from_direct(d, n1, n2):
    return direct_ufc(d)


def from_10ml(d, n1, n2):
    return filtrate_10ml_ufc(n1)


def from_100ml(d, n1, n2):
    return filtrate_100ml_ufc(n2)


def from_filtrations(d, n1, n2):
    return combined_filtration_ufc(n1, n2)


def direct_or_10ml(d, n1, n2):
    return max(direct_ufc(d), filtrate_10ml_ufc(n1))


def direct_or_filtrations(d, n1, n2):
    return max(direct_ufc(d), combined_filtration_ufc(n1, n2))


# ============================================================================
# Outcome Builders
# ============================================================================

def warning_message(cited: str) -> str:
    """Improbable-case warning citing a value (or bound) in UFC/L."""
    return f"{WARNING_PREFIX}{cited})"


SATURATED_10ML_WARNING = warning_message(FILTRATE_10ML_SATURATED_MESSAGE)


def concentration(formula) -> OutcomeFn:
    def outcome(d, n1, n2) -> Outcome:
        return Outcome(OutcomeKind.CONCENTRATION, value=formula(d, n1, n2))
    return outcome


def warning(formula) -> OutcomeFn:
    def outcome(d, n1, n2) -> Outcome:
        cited = f"{format_ufc(formula(d, n1, n2))} {UNIT}"
        return Outcome(OutcomeKind.WARNING, message=warning_message(cited))
    return outcome


def fixed(kind: OutcomeKind, message: str) -> OutcomeFn:
    def outcome(d, n1, n2) -> Outcome:
        return Outcome(kind, message=message)
    return outcome


def direct_over_saturated_10ml_warning(d, n1, n2) -> Outcome:
    """Saturated 10 ml filtration, readable 100 ml filtration."""
    if direct_ufc(d) > FILTRATE_10ML_SATURATION_UFC:
        return warning(from_direct)(d, n1, n2)
    return Outcome(OutcomeKind.WARNING, message=SATURATED_10ML_WARNING)


def direct_over_saturated_filtrations(d, n1, n2) -> Outcome:
    """Both filtrations saturated: the direct plate decides if it reads higher."""
    if direct_ufc(d) > FILTRATE_10ML_SATURATION_UFC:
        return concentration(from_direct)(d, n1, n2)
    return Outcome(OutcomeKind.QUALITATIVE, message=FILTRATE_10ML_SATURATED_MESSAGE)


QUALITATIVE = OutcomeKind.QUALITATIVE
INTERFERENCE = OutcomeKind.INTERFERENCE


# ============================================================================
# Decision Tables
# ============================================================================

# All channels measured. Rows are mutually exclusive over integer counts.
COUNT_RULES: tuple[Rule, ...] = (
    # --- No colony on the direct plate ---
    Rule("below_detection", zero, zero, zero,
         fixed(QUALITATIVE, BELOW_DETECTION_MESSAGE)),
    Rule("filtrate_100ml_count", zero, zero, readable_filtrate,
         concentration(from_100ml)),
    Rule("filtrate_100ml_saturated", zero, zero, filtrate_saturated,
         fixed(QUALITATIVE, FILTRATE_100ML_SATURATED_MESSAGE)),
    Rule("low_10ml_without_100ml", zero, low_10ml, zero,
         warning(from_10ml)),
    Rule("low_10ml_with_100ml", zero, low_10ml, readable_filtrate,
         concentration(from_filtrations)),
    Rule("low_10ml_with_100ml_saturated", zero, low_10ml, filtrate_saturated,
         fixed(QUALITATIVE, FILTRATE_100ML_SATURATED_MESSAGE)),
    Rule("filtrate_10ml_without_100ml", zero, counted_10ml, zero,
         warning(from_10ml)),
    Rule("filtrations_combined", zero, counted_10ml, readable_filtrate,
         concentration(from_filtrations)),
    Rule("filtrate_10ml_with_100ml_saturated", zero, counted_10ml, filtrate_saturated,
         concentration(from_10ml)),
    Rule("filtrate_10ml_saturated_100ml_readable", zero, filtrate_saturated, at_most(SAT),
         fixed(OutcomeKind.WARNING, SATURATED_10ML_WARNING)),
    Rule("filtrations_saturated", zero, filtrate_saturated, filtrate_saturated,
         fixed(QUALITATIVE, FILTRATE_10ML_SATURATED_MESSAGE)),

    # --- 1 to 2 colonies on the direct plate ---
    Rule("low_direct_only", low_direct, zero, zero,
         warning(from_direct)),
    Rule("low_direct_10ml_saturated", low_direct, filtrate_saturated, any_count,
         fixed(QUALITATIVE, FILTRATE_10ML_SATURATED_MESSAGE)),
    Rule("low_direct_with_10ml", low_direct, readable_filtrate, zero,
         warning(direct_or_10ml)),
    Rule("low_direct_with_filtrations", low_direct, readable_filtrate, readable_filtrate,
         concentration(direct_or_filtrations)),
    Rule("low_direct_with_100ml_saturated", low_direct, readable_filtrate, filtrate_saturated,
         concentration(direct_or_10ml)),

    # --- 3 to 150 colonies on the direct plate ---
    Rule("direct_without_10ml", counted_direct, zero, any_count,
         warning(from_direct)),
    Rule("direct_with_10ml", counted_direct, readable_filtrate, zero,
         warning(direct_or_10ml)),
    Rule("direct_with_filtrations", counted_direct, readable_filtrate, readable_filtrate,
         concentration(direct_or_filtrations)),
    Rule("direct_with_100ml_saturated", counted_direct, readable_filtrate, filtrate_saturated,
         concentration(direct_or_10ml)),
    Rule("direct_with_10ml_saturated", counted_direct, filtrate_saturated, at_most(SAT),
         direct_over_saturated_10ml_warning),
    Rule("direct_with_filtrations_saturated", counted_direct, filtrate_saturated, filtrate_saturated,
         direct_over_saturated_filtrations),

    # --- Direct plate saturated ---
    Rule("direct_saturated", direct_saturated, any_count, any_count,
         fixed(QUALITATIVE, DIRECT_SATURATED_MESSAGE)),
)

# At least one channel interfered. Ordered: first match wins.
INTERFERENCE_RULES: tuple[Rule, ...] = (
    Rule("all_channels_interfered", interfered, interfered, interfered,
         fixed(INTERFERENCE, INTERFERENCE_PREVENTS_DETECTION_MESSAGE)),
    Rule("threshold_raised_to_5000", zero, interfered, interfered,
         fixed(INTERFERENCE, threshold_raised_message(5000))),
    Rule("threshold_raised_to_100_direct_interfered", interfered, zero, interfered,
         fixed(INTERFERENCE, threshold_raised_message(100))),
    Rule("threshold_raised_to_100", zero, zero, interfered,
         fixed(INTERFERENCE, threshold_raised_message(100))),
    Rule("not_detected_on_100ml", interfered, interfered, zero,
         fixed(INTERFERENCE, NOT_DETECTED_MESSAGE)),
    Rule("direct_interfered", interfered, at_most(SAT), at_most(SAT),
         concentration(from_filtrations)),
    Rule("filtrate_10ml_interfered", at_most(DIRECT_SATURATION_COUNT), interfered, at_most(SAT),
         concentration(from_direct)),
    Rule("filtrate_100ml_interfered", at_most(DIRECT_SATURATION_COUNT), at_most(SAT), interfered,
         concentration(direct_or_10ml)),
    Rule("direct_and_10ml_interfered", interfered, interfered, at_most(SAT),
         concentration(from_100ml)),
    Rule("filtrations_interfered", at_most(DIRECT_SATURATION_COUNT), interfered, interfered,
         concentration(from_direct)),
    Rule("direct_and_100ml_interfered", interfered, at_most(SAT), interfered,
         concentration(from_10ml)),
)


class UFCRulesEngine:
    """Apply the Legionella counting rules deterministically.

    The engine is stateless; one instance can interpret any number of
    sample types in any order.
    """

    def __init__(
        self,
        count_rules: tuple[Rule, ...] = COUNT_RULES,
        interference_rules: tuple[Rule, ...] = INTERFERENCE_RULES,
    ):
        self.count_rules = count_rules
        self.interference_rules = interference_rules

    def rules_for(self, sample: SampleInput) -> tuple[Rule, ...]:
        """Decision table that applies to a sample."""
        if sample.interference_detected:
            return self.interference_rules
        return self.count_rules

    def matching_rules(self, sample: SampleInput) -> list[str]:
        """Names of every rule whose predicates match, in table order."""
        return [rule.name for rule in self.rules_for(sample) if rule.matches(sample)]

    def interpret(self, sample: SampleInput) -> SampleResult:
        """Interpret the readings of one sample type.

        Args:
            sample: Readings of the direct plate and both filtrations

        Returns:
            SampleResult; UNCLASSIFIED when no rule covers the readings
        """
        interference = sample.interference_detected
        counts = tuple(
            r.count if isinstance(r, Measured) else None for r in sample.readings
        )

        for rule in self.rules_for(sample):
            if rule.matches(sample):
                outcome = rule.outcome(*counts)
                logger.debug(
                    "Sample %s matched rule %s -> %s",
                    sample.to_counts(), rule.name, outcome.kind.value,
                )
                return self._build_result(outcome, rule.name, interference)

        return self._unclassified(sample)

    def _build_result(
        self, outcome: Outcome, rule_name: str, interference: bool
    ) -> SampleResult:
        if outcome.kind == OutcomeKind.CONCENTRATION:
            rounded = round_significant(outcome.value)
            return SampleResult(
                message=CONCENTRATION_TEMPLATE.format(value=format_ufc(rounded)),
                kind=outcome.kind,
                interference_detected=interference,
                concentration=float(outcome.value),
                rounded_concentration=rounded,
                rule=rule_name,
            )
        return SampleResult(
            message=outcome.message,
            kind=outcome.kind,
            interference_detected=interference,
            rule=rule_name,
        )

    def _unclassified(self, sample: SampleInput) -> SampleResult:
        d, n1, n2 = (str(r) for r in sample.readings)
        if sample.interference_detected:
            message = UNCLASSIFIED_INTERFERENCE_TEMPLATE.format(d=d, n1=n1, n2=n2)
        else:
            message = UNCLASSIFIED_TEMPLATE.format(d=d, n1=n1, n2=n2)
        logger.warning("No interpretation rule for sample %s", sample.to_counts())
        return SampleResult(
            message=message,
            kind=OutcomeKind.UNCLASSIFIED,
            interference_detected=sample.interference_detected,
        )


_default_engine = UFCRulesEngine()


def interpret(sample: SampleInput) -> SampleResult:
    """Interpret one sample type with the default rule tables."""
    return _default_engine.interpret(sample)
