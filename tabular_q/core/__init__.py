"""
Core Module - Configuration, Data Structures and Tables.

This module provides the building blocks shared by every agent:
    - QLearnerConfig: validated construction parameters
    - StateSpace: canonicalization of sensations into integer handles
    - ValueTable: lazily created per-state action-value rows
    - Experience, Environment: transition record and environment protocol
    - UsageError, DimensionMismatchError, PolicyFileError: error taxonomy

Example:
    >>> from tabular_q.core import StateSpace, ValueTable
    >>> space, table = StateSpace(), ValueTable(num_actions=3)
    >>> table.row_for(space.canonicalize([0.0, 0.0]))
    array([0., 0., 0.])
"""

from tabular_q.core.config import QLearnerConfig, validate_epsilon
from tabular_q.core.exceptions import (
    DimensionMismatchError,
    PolicyFileError,
    UsageError,
)
from tabular_q.core.state_space import StateSpace
from tabular_q.core.types import (
    Environment,
    Experience,
    FloatArray,
    Sensation,
    as_sensation,
)
from tabular_q.core.value_table import ValueTable

__all__ = [
    "QLearnerConfig",
    "validate_epsilon",
    "StateSpace",
    "ValueTable",
    "Environment",
    "Experience",
    "FloatArray",
    "Sensation",
    "as_sensation",
    "UsageError",
    "DimensionMismatchError",
    "PolicyFileError",
]
