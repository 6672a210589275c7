"""Shared text helpers used across the booking assistant."""


def contains_any(text: str, keywords: list[str]) -> bool:
    """Case-insensitive substring match against any of the keywords.

    Examples:
        >>> contains_any("I need a Follow-up", ["follow"])
        True
        >>> contains_any("checkup", ["exam", "physical"])
        False
    """
    lower = text.lower()
    return any(keyword in lower for keyword in keywords)


def ordinal(n: int) -> str:
    """Return the English ordinal for a day of the month.

    Examples:
        >>> ordinal(1)
        '1st'
        >>> ordinal(12)
        '12th'
        >>> ordinal(23)
        '23rd'
    """
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
