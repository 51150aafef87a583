"""Human-readable summaries of quote results."""

from .models.quote import ScoredQuote
from .models.shipment import ShipmentSpec


def rates_found_message(shipment: ShipmentSpec, count: int) -> str:
    """One-line summary of a rate lookup."""
    if not count:
        return f"No quotes found for {shipment.lane}."
    return f"Found {count} quotes for {shipment}."


def quote_line(rank: int, quote: ScoredQuote) -> str:
    """Single ranked line, e.g. '1. Lufthansa - 1011.00 EUR (air, ~4d)'."""
    details = quote.mode.value
    if quote.transit_days:
        details += f", ~{quote.transit_days}d"
    return (
        f"{rank}. {quote.display_name} - "
        f"{quote.breakdown.total_cost_usd:,.2f} {quote.currency} ({details})"
    )


def ranked_message(title: str, quotes: list[ScoredQuote]) -> str:
    """Multi-line summary of ranked quotes under a title."""
    if not quotes:
        return "No matching rates."
    lines = [f"Top {len(quotes)} {title}:"]
    lines.extend(quote_line(i, q) for i, q in enumerate(quotes, start=1))
    return "\n".join(lines)
