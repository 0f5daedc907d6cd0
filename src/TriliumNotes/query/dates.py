"""Strict ISO date validation for date-valued note properties.

Only two shapes are accepted:

- ``YYYY-MM-DD``
- ``YYYY-MM-DDThh:mm:ss[.sss]Z``

Relative expressions understood by the search engine itself (``TODAY-7``,
``MONTH``) are rejected on purpose so that callers always send absolute
dates.
"""

from __future__ import annotations

import re

from dateutil import parser as dt_parser

from TriliumNotes.core.errors import ValidationError


_RE_DATE = re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})", re.ASCII)
_RE_DATETIME = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})(?:\.\d{3})?Z",
    re.ASCII,
)


def validate_iso_date(value: str, property_name: str) -> str:
    """Validate a date-valued criteria value.

    Args:
        value: Raw value supplied by the caller.
        property_name: Property the value belongs to, used in the error message.

    Returns:
        The value unchanged.

    Raises:
        ValidationError: If the value is not one of the accepted shapes, or is
            shaped correctly but not a real calendar date/time.
    """
    match = _RE_DATE.fullmatch(value) or _RE_DATETIME.fullmatch(value)
    if match is None:
        raise ValidationError(
            f"Invalid date format for '{property_name}': '{value}'. "
            "Use ISO format 'YYYY-MM-DD' or 'YYYY-MM-DDTHH:mm:ss.sssZ'",
            property_name=property_name,
            value=value,
        )

    try:
        parsed = dt_parser.isoparse(value)
    except (ValueError, OverflowError):
        parsed = None

    # isoparse rolls 24:00:00 over to the next day; the hour must survive parsing.
    fields = match.groupdict()
    if parsed is None or (fields.get("hour") is not None and parsed.hour != int(fields["hour"])):
        raise ValidationError(
            f"Invalid date value for '{property_name}': '{value}' is not a real calendar date",
            property_name=property_name,
            value=value,
        )
    return value
