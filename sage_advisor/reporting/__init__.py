"""
sage_advisor.reporting — Formatting and export of advisory results.

Modules:
  formatters — ASCII terminal formatters for Typer CLI commands.
  export     — JSON/CSV export helpers for results and history.
"""
