"""
Human-readable elapsed time.
"""


def _unit(value: int, singular: str, plural: str) -> str:
    return f"1 {singular}" if value == 1 else f"{value} {plural}"


def format_elapsed(seconds: float) -> str:
    """
    Render an elapsed duration at the coarsest useful precision.

    Examples: ``"250 ms"``, ``"1 sec"``, ``"2 mins 5 secs"``, ``"1 hr 3 mins"``.
    Lower units that are zero are omitted.
    """
    if seconds < 0:
        raise ValueError("Elapsed time cannot be negative")

    total_seconds = int(seconds)

    if total_seconds >= 3600:
        hours, remainder = divmod(total_seconds, 3600)
        minutes = remainder // 60
        result = _unit(hours, "hr", "hrs")
        if minutes:
            result += " " + _unit(minutes, "min", "mins")
        return result

    if total_seconds >= 60:
        minutes, secs = divmod(total_seconds, 60)
        result = _unit(minutes, "min", "mins")
        if secs:
            result += " " + _unit(secs, "sec", "secs")
        return result

    if total_seconds >= 1:
        return _unit(total_seconds, "sec", "secs")

    return f"{int(seconds * 1000)} ms"
