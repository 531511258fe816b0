"""
Display Formatting

Compact labels used by the dashboard cards.
"""


def format_number(value: float) -> str:
    """``1234`` -> ``"1.2K"``, ``2500000`` -> ``"2.5M"``"""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:.0f}"


def format_currency(value: float, symbol: str = "₹") -> str:
    return f"{symbol}{format_number(value)}"


def format_hours(hours: float) -> str:
    if hours >= 1_000:
        return f"{hours / 1_000:.1f}K hrs"
    return f"{hours:.0f} hrs"


def format_growth(percent: float) -> str:
    """Signed percentage with one decimal, e.g. ``"+20.0%"``"""
    return f"{percent:+.1f}%"
