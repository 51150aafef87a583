"""Rate Quoter: freight rate lookup, pricing and multi-factor ranking."""

__version__ = "0.1.0"
