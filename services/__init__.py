"""
Services Package.

Orchestration and presentation for the bootstrap client:

    run_controller.py   BootstrapRunController - state machine for one run
    reporting.py        print_table / render_table - rich table of read-back rows

Usage:
    from services import BootstrapRunController, print_table

    result = BootstrapRunController(config).run()
    print_table(config.seed.collection.field_names, result.rows)
"""

from .reporting import build_table, print_table, render_table, format_value
from .run_controller import BootstrapRunController, run_bootstrap, STAGE_NAMES

__all__ = [
    "BootstrapRunController",
    "run_bootstrap",
    "STAGE_NAMES",
    "build_table",
    "print_table",
    "render_table",
    "format_value",
]
