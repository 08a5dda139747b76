"""Parsing of PoolCounter elapsed-time strings.

PoolCounter reports accumulated times such as ``389 days 9343h 3m 28.000000s``
or ``0.957994s``. The day count is a plain integer prefix; the remainder is a
sequence of ``<number><unit>`` tokens which may be separated by spaces.
"""

import re

from ..exceptions import ValueParseError


DAYS_SEPARATOR = " days "
SECONDS_PER_DAY = 24 * 60 * 60
NANOSECONDS_PER_SECOND = 1_000_000_000

_UNIT_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": NANOSECONDS_PER_SECOND,
    "m": 60 * NANOSECONDS_PER_SECOND,
    "h": 60 * 60 * NANOSECONDS_PER_SECOND,
}

_DAYS_PATTERN = re.compile(r"[+-]?\d+")
_TOKEN_PATTERN = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")
_WHITESPACE = re.compile(r"\s+")


def parse_duration(text: str, strict: bool = False) -> float:
    """
    Convert a PoolCounter duration string to seconds.

    Args:
        text: Duration text, optionally prefixed with ``<int> days ``
        strict: Raise instead of substituting zero for unparsable parts

    Returns:
        float: Duration in seconds

    Raises:
        ValueParseError: In strict mode, if any component cannot be parsed
    """
    days_text, separator, remainder = text.partition(DAYS_SEPARATOR)

    if not separator:
        return float(_component(parse_unit_duration, text, strict))

    days = _component(_parse_days, days_text, strict)
    seconds = _component(parse_unit_duration, remainder, strict)

    return float(SECONDS_PER_DAY * days) + seconds


def parse_unit_duration(text: str) -> float:
    """
    Parse an hour/minute/second duration such as ``22h 14m 53.898438s``.

    Whitespace is insignificant and removed before parsing. Components are
    summed in integer nanoseconds so that ``53.898438s`` is not subject to
    accumulated floating point error.

    Raises:
        ValueParseError: If the text does not follow the duration grammar
    """
    compact = _WHITESPACE.sub("", text)
    source = compact

    negative = False
    if compact[:1] in ("-", "+"):
        negative = compact[0] == "-"
        compact = compact[1:]

    if compact == "0":
        return 0.0
    if not compact:
        raise ValueParseError(source, "empty duration")

    nanoseconds = 0
    position = 0
    while position < len(compact):
        match = _TOKEN_PATTERN.match(compact, position)
        whole, fraction, unit = match.groups()

        if not whole and not fraction:
            raise ValueParseError(source, "expected a number")
        if not unit:
            raise ValueParseError(source, "missing unit")
        if unit not in _UNIT_NANOSECONDS:
            raise ValueParseError(source, f"unknown unit {unit!r}")

        scale = _UNIT_NANOSECONDS[unit]
        nanoseconds += int(whole or 0) * scale
        if fraction:
            nanoseconds += int(fraction) * scale // (10 ** len(fraction))

        position = match.end()

    whole_seconds, remaining = divmod(nanoseconds, NANOSECONDS_PER_SECOND)
    seconds = float(whole_seconds) + float(remaining) / 1e9

    return -seconds if negative else seconds


def _parse_days(text: str) -> int:
    if not _DAYS_PATTERN.fullmatch(text):
        raise ValueParseError(text, "day count is not an integer")
    return int(text)


def _component(parser, text: str, strict: bool):
    try:
        return parser(text)
    except ValueParseError:
        if strict:
            raise
        return 0
