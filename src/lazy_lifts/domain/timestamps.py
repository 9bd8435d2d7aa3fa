"""ISO timestamp parsing shared by stores and backups."""

from datetime import UTC, datetime


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO string; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def parse_optional_timestamp(value: object) -> datetime | None:
    if value is None:
        return None
    return parse_timestamp(value)
