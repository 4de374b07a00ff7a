"""Evaluate a full sample set and render the results.

Each sample type is interpreted independently. A sample type with no
colony on any measured channel is left out of the report, even when a
channel is interfered; the aggregate notice covers interference.
"""

import logging
from typing import Mapping

from .rules.schemas import SampleInput, SampleReport
from .rules.ufc_criteria import INTERFERENCE_NOTICE
from .rules.ufc_engine import UFCRulesEngine

logger = logging.getLogger(__name__)


def should_report(sample: SampleInput) -> bool:
    """Check if a sample type belongs in the report.

    Reported only when a measured channel counted at least one colony. An
    interfered channel is not a count: a sample whose only signal is
    interference is omitted, and the aggregate notice reports it instead.
    """
    return sample.has_positive_count


def evaluate_samples(
    samples: Mapping[str, SampleInput],
    engine: UFCRulesEngine | None = None,
) -> SampleReport:
    """Interpret every sample type of a sample set.

    Args:
        samples: Sample type -> readings, in display order
        engine: Rules engine to use (default tables if None)

    Returns:
        SampleReport with the reported results, the omitted types and the
        aggregate interference flag
    """
    engine = engine or UFCRulesEngine()
    report = SampleReport()

    for sample_type, sample in samples.items():
        result = engine.interpret(sample)
        if result.interference_detected:
            report.interference_detected = True

        if should_report(sample):
            report.results[sample_type] = result
        else:
            report.omitted.append(sample_type)

    logger.info(
        "Evaluated %d sample types: %d reported, %d omitted%s",
        len(samples),
        len(report.results),
        len(report.omitted),
        " (interfering flora)" if report.interference_detected else "",
    )
    return report


def format_report(report: SampleReport) -> str:
    """Render a report as text, one line per reported sample type."""
    lines = [
        f"Type {sample_type}: {result.message}"
        for sample_type, result in report.results.items()
    ]
    if report.interference_detected:
        lines.append(INTERFERENCE_NOTICE)
    return "\n".join(lines)
