"""Input adapter: raw bench-sheet values to engine inputs.

Values typed on the bench sheet are free text. Empty or non-numeric entries
count as zero colonies, the way the calculator form always read them. A
channel toggled as overgrown by interfering flora is not read at all and
becomes ``Interfered`` for every sample type.
"""

import logging
import re
from typing import Iterable, Mapping

from .rules.schemas import INTERFERED, Channel, Measured, SampleInput, ValidationError

logger = logging.getLogger(__name__)

# Leading number as a browser's parseFloat reads it
_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_count(raw) -> float:
    """Read a colony count from a form value.

    Args:
        raw: Text typed by the user, a number, or None

    Returns:
        The leading numeric value (``"12 colonies"`` -> 12.0, ``"3,5"`` -> 3.5),
        0.0 when the value is empty or not numeric
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)

    text = str(raw).strip().replace(",", ".")
    match = _NUMBER_PREFIX.match(text)
    if not match:
        if text:
            logger.debug("Non-numeric count %r read as 0", raw)
        return 0.0
    return float(match.group(0))


def parse_channels(channels: Iterable) -> set[Channel]:
    """Normalize channel names (``"d"``, ``"n_1"``, ``"n_2"``) to Channel values.

    Raises:
        ValidationError: For an unknown channel name
    """
    parsed = set()
    for channel in channels:
        try:
            parsed.add(Channel(channel))
        except ValueError:
            valid = ", ".join(c.value for c in Channel)
            raise ValidationError(
                f"Unknown channel {channel!r}. Use: {valid}"
            ) from None
    return parsed


def build_sample_input(raw_d, raw_n1, raw_n2, interfered: Iterable = ()) -> SampleInput:
    """Build the engine input of one sample type from raw form values.

    Args:
        raw_d: Direct plate count as typed
        raw_n1: 10 ml filtration count as typed
        raw_n2: 100 ml filtration count as typed
        interfered: Channels overgrown by interfering flora; their raw
            values are ignored

    Raises:
        ValidationError: For negative counts or unknown channel names
    """
    channels = parse_channels(interfered)
    raw_values = {
        Channel.DIRECT: raw_d,
        Channel.FILTRATE_10ML: raw_n1,
        Channel.FILTRATE_100ML: raw_n2,
    }
    readings = {
        channel: INTERFERED if channel in channels else Measured(parse_count(raw))
        for channel, raw in raw_values.items()
    }
    return SampleInput(
        direct=readings[Channel.DIRECT],
        filtrate_10ml=readings[Channel.FILTRATE_10ML],
        filtrate_100ml=readings[Channel.FILTRATE_100ML],
    )


def build_sample_set(
    rows: Mapping[str, Mapping],
    interfered: Iterable = (),
) -> dict[str, SampleInput]:
    """Build inputs for every sample type of a bench sheet.

    Args:
        rows: Sample type -> ``{"d": ..., "n_1": ..., "n_2": ...}``; missing
            entries read as empty
        interfered: Channels overgrown by interfering flora, applied to every
            sample type as the sheet toggles are

    Returns:
        Sample type -> SampleInput, in the order of ``rows``
    """
    channels = parse_channels(interfered)
    samples = {}
    for sample_type, row in rows.items():
        row = row or {}
        try:
            samples[str(sample_type)] = build_sample_input(
                row.get(Channel.DIRECT.value),
                row.get(Channel.FILTRATE_10ML.value),
                row.get(Channel.FILTRATE_100ML.value),
                interfered=channels,
            )
        except ValidationError as e:
            raise ValidationError(f"Type {sample_type}: {e}") from e
    return samples
