"""Starter .gitchanges.toml template."""

DEFAULT_TOML = """\
# gitchanges configuration
version = "1.0"

[diff]
# base = "origin/main"            # omit to compare the work tree
# head = "HEAD"
# paths = ["src", "schema"]       # limit git's comparison to these pathspecs
timeout = 0                       # seconds; 0 = no timeout
fallback_to_first_commit = false  # diff from the first commit if base is missing

[output]
format = "terminal"               # terminal | json | yaml
show_summary = true

# [triggers.codegen]
# description = "Regenerate API clients"
# paths = ["schema/**"]
# statuses = ["A", "M"]           # codes (A C D M R X ...) or names (added, ...)
"""
