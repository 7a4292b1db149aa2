"""UTC timestamp helpers.

Every timestamp the relay hands to the mobile client is rendered the same
way: ISO-8601, UTC, millisecond precision, ``Z`` suffix
(``2030-01-01T00:00:00.000Z``).
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def from_epoch(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an upstream ISO-8601 timestamp; naive values are taken as UTC.

    Raises ValueError when *value* is not a timestamp.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def isoformat_millis(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
