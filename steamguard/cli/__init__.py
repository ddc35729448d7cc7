"""Command-line tools for steamguard.

- ``python -m steamguard.cli`` (``steamguard.cli.guard``): login codes,
  confirmation list/allow/cancel and session cookie management.
"""
