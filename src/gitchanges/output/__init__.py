"""Reporters — rich terminal, JSON, and YAML renderings of a Diff."""
