"""Command-line interface for the date spine builder."""
