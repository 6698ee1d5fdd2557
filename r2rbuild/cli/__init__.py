"""r2rbuild CLI — Typer-based command-line interface.

Provides the ``r2rbuild`` and ``r2rbuildx`` commands. Progress output uses
Rich; usage errors go to stderr with exit code 1.
"""
