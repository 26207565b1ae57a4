"""Date manipulation utilities"""

from datetime import date, datetime


def parse_issue_date(value: str) -> date:
    """
    Parse an ISO-8601 date or datetime string into a date.

    The loan service may send either "2024-01-15" or a full timestamp such as
    "2024-01-15T00:00:00.000Z".

    Raises:
        ValueError: If the value is not an ISO-8601 string
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO date string, got {value!r}")
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()
