"""Command-line interface for real-income."""
