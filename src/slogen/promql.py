"""
Prometheus formatting helpers.

Durations, label filters and numbers are rendered exactly the way
Prometheus (and the rules consuming our recordings) expect them.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal
from typing import Mapping

__all__ = [
    "duration_to_prom_str",
    "parse_prom_duration",
    "labels_to_prom_filter",
    "labels_to_prom_group",
    "merge_labels",
    "format_float",
    "format_float_plain",
]

_MS_PER_UNIT = [
    # (unit, milliseconds, only when exact)
    ("y", 1000 * 60 * 60 * 24 * 365, True),
    ("w", 1000 * 60 * 60 * 24 * 7, True),
    ("d", 1000 * 60 * 60 * 24, False),
    ("h", 1000 * 60 * 60, False),
    ("m", 1000 * 60, False),
    ("s", 1000, False),
    ("ms", 1, False),
]

_DURATION_PATTERN = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)


def duration_to_prom_str(duration: timedelta) -> str:
    """
    Convert a timedelta to a Prometheus duration string.

    Years and weeks are only used when they divide the duration exactly,
    so 30 days stays ``30d`` while 28 days becomes ``4w``.

    Example:
        >>> duration_to_prom_str(timedelta(minutes=90))
        '1h30m'
    """
    ms = int(duration / timedelta(milliseconds=1))
    if ms == 0:
        return "0s"
    if ms < 0:
        raise ValueError(f"negative duration {duration} can't be a Prometheus duration")

    out = ""
    for unit, mult, exact in _MS_PER_UNIT:
        if exact and ms % mult != 0:
            continue
        value = ms // mult
        if value > 0:
            out += f"{value}{unit}"
            ms -= value * mult
    return out


def parse_prom_duration(value: str) -> timedelta:
    """Parse a Prometheus duration string (``5m``, ``1h30m``, ``4w``)."""
    if value == "0":
        return timedelta(0)

    match = _DURATION_PATTERN.match(value)
    if not value or match is None:
        raise ValueError(f"could not parse prom duration {value!r}")

    total_ms = 0
    for group, (_, mult, _) in zip(match.groups(), _MS_PER_UNIT):
        if group:
            total_ms += int(group) * mult
    return timedelta(milliseconds=total_ms)


def _quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\t", "\\t")
    )
    return f'"{escaped}"'


def labels_to_prom_filter(labels: Mapping[str, str]) -> str:
    """
    Convert labels to a Prometheus selector filter.

    Example:
        >>> labels_to_prom_filter({"b": "2", "a": "1"})
        '{a="1", b="2"}'
    """
    parts = sorted(f"{k}={_quote(v)}" for k, v in labels.items())
    return "{" + ", ".join(parts) + "}"


def labels_to_prom_group(labels: Mapping[str, str]) -> str:
    """Convert label keys to a sorted ``on(...)``/``by(...)`` grouping list."""
    return ", ".join(sorted(labels))


def merge_labels(*label_maps: Mapping[str, str] | None) -> dict[str, str]:
    """Merge label maps, later maps override earlier ones."""
    merged: dict[str, str] = {}
    for labels in label_maps:
        if labels:
            merged.update(labels)
    return merged


def _shortest_decimal(value: float) -> Decimal:
    return Decimal(repr(float(value))).normalize()


def format_float(value: float) -> str:
    """
    Render a float with the shortest representation, switching to
    exponent notation for very small or large magnitudes.

    Example:
        >>> format_float(30.0), format_float(0.999), format_float(0.00001)
        ('30', '0.999', '1e-05')
    """
    if value != value or value in (float("inf"), float("-inf")):
        return repr(float(value))
    if value == 0:
        return "0"

    dec = _shortest_decimal(value)
    exponent = dec.adjusted()
    if exponent < -4 or exponent >= 6:
        sign, digits, _ = dec.as_tuple()
        mantissa = str(digits[0])
        if len(digits) > 1:
            mantissa += "." + "".join(str(d) for d in digits[1:])
        exp_sign = "-" if exponent < 0 else "+"
        return f"{'-' if sign else ''}{mantissa}e{exp_sign}{abs(exponent):02d}"
    return format(dec, "f")


def format_float_plain(value: float) -> str:
    """Render a float in plain decimal notation (``99.9``, ``100``)."""
    if value == 0:
        return "0"
    return format(_shortest_decimal(value), "f")
