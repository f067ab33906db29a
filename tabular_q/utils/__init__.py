"""
Utilities Module.

    - diagnostics: text dumps of the state space / Q-table and value surfaces
    - visualization: matplotlib plots (requires the ``plot`` extra)

``visualization`` is not imported here so that matplotlib stays optional.
"""

from tabular_q.utils.diagnostics import (
    describe_state,
    dump_q,
    dump_state_space,
    value_surface,
    write_value_surface,
)

__all__ = [
    "describe_state",
    "dump_q",
    "dump_state_space",
    "value_surface",
    "write_value_surface",
]
