"""Command-line interface for Vellum."""
