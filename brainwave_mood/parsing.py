"""
Conversion between delimited-text recordings and band samples.

Recordings are CSV-like text: one header line followed by rows of
``timestamp,delta,theta,alpha,beta,gamma``. Extra trailing fields are ignored.
"""

import logging
import math
import re
from collections.abc import Iterable

from .errors import MalformedRow
from .models import BandSample

logger = logging.getLogger(__name__)

DELIMITER = ","
FIELD_NAMES = ("timestamp", "delta", "theta", "alpha", "beta", "gamma")
CHUNK_HEADER = "timestamps,Delta,Theta,Alpha,Beta,Gamma"

# Plain decimal or exponent notation only; no whitespace, underscores or hex
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_row(line: str, delimiter: str = DELIMITER) -> BandSample:
    """
    Parse one data row.

    Raises:
        MalformedRow: If the row has fewer than six fields or any of the first
            six is not a finite decimal number
    """
    fields = line.split(delimiter)
    if len(fields) < len(FIELD_NAMES):
        raise MalformedRow(f"expected {len(FIELD_NAMES)} fields, got {len(fields)}")

    numeric = fields[: len(FIELD_NAMES)]
    for field in numeric:
        if NUMBER_PATTERN.fullmatch(field) is None:
            raise MalformedRow(f"not a number: {field!r}")
    values = [float(field) for field in numeric]

    if not all(math.isfinite(value) for value in values):
        raise MalformedRow(f"non-finite value in {line!r}")

    return BandSample(**dict(zip(FIELD_NAMES, values)))


def parse_points(raw_text: str, delimiter: str = DELIMITER) -> list[BandSample]:
    """
    Parse a whole recording into samples, in file order.

    The first non-empty line is treated as the header and skipped. Rows that
    fail to parse are dropped; the rest of the payload is still used.

    Args:
        raw_text: The recording as text
        delimiter: Field separator

    Returns:
        The parsed samples, unsorted
    """
    lines = [line for line in raw_text.splitlines() if line.strip()]
    points: list[BandSample] = []
    dropped = 0

    for line in lines[1:]:
        try:
            points.append(parse_row(line, delimiter))
        except MalformedRow as e:
            dropped += 1
            logger.debug("Dropping malformed row: %s", e)

    if dropped:
        logger.debug("Parsed %d rows, dropped %d malformed", len(points), dropped)
    return points


def serialize_chunk(points: Iterable[BandSample]) -> str:
    """Render samples back to CSV text with the fixed chunk header."""
    lines = [CHUNK_HEADER]
    for point in points:
        lines.append(
            DELIMITER.join(str(getattr(point, name)) for name in FIELD_NAMES)
        )
    return "\n".join(lines)
