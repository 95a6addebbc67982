"""Display formatting shared by suggestions, proposals and budget messages."""

from __future__ import annotations


def money(amount: float, currency: str = "USD") -> str:
    """``12500`` -> ``$12,500``; other currencies keep their code as a suffix."""
    if currency == "USD":
        return f"${amount:,.0f}"
    return f"{amount:,.0f} {currency}"


def weeks_label(weeks: int) -> str:
    return "1 week" if weeks == 1 else f"{weeks} weeks"
