"""Command-line interface for the playlist tagger."""
