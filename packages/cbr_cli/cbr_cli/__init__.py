"""Command-line interface for the CBR Gateway."""
