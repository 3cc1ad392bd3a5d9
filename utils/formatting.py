"""
Formatting utilities.
"""


def format_currency(amount: int, currency: str = "NZD") -> str:
    """
    Format an integer amount as currency.

    Args:
        amount: The amount in whole units (e.g., dollars, not cents).
        currency: Currency code (default NZD).

    Returns:
        Formatted currency string. Negative amounts carry a leading minus.
    """
    symbols = {
        "NZD": "$",
        "AUD": "A$",
        "USD": "US$",
        "GBP": "£",
    }
    symbol = symbols.get(currency, currency + " ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,}"


def format_percent(fraction: float, decimals: int = 1) -> str:
    """Format a fraction such as a comparable weight, 0.376 -> "37.6%"."""
    return f"{fraction:.{decimals}%}"
