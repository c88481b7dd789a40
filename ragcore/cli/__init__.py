"""Command-line tools for ragcore."""
