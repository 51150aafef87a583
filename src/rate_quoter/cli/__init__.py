"""Command-line interface for the rate quoter."""
