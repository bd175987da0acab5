"""Command interpretation and per-save world rules."""
