"""
Value Table.

Maps canonical state handles to value rows Q(s, ·). A row is created the
first time its state is touched, filled with the configured initial value,
and afterwards only mutated in place.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np

from .types import FloatArray


class ValueTable:
    """
    Lazily populated mapping from state handle to per-action values.

    Parameters
    ----------
    num_actions : int
        Length of every value row
    initial_value : float
        Value assigned to each entry of a newly created row

    Examples
    --------
    >>> table = ValueTable(num_actions=2, initial_value=1.0)
    >>> table.row_for(0)
    array([1., 1.])
    >>> table.set_value(0, 1, 3.5)
    >>> table.value_of(0, 1)
    3.5
    """

    def __init__(self, num_actions: int, initial_value: float = 0.0) -> None:
        self.num_actions = num_actions
        self.initial_value = float(initial_value)
        self._rows: Dict[int, FloatArray] = {}

    def row_for(self, state: int) -> FloatArray:
        """Row for ``state``, created with the initial value if absent."""
        row = self._rows.get(state)
        if row is None:
            row = np.full(self.num_actions, self.initial_value, dtype=np.float64)
            self._rows[state] = row
        return row

    def get(self, state: int) -> Optional[FloatArray]:
        """Row for ``state`` or None; never creates an entry."""
        return self._rows.get(state)

    def value_of(self, state: int, action: int) -> float:
        return float(self.row_for(state)[action])

    def set_value(self, state: int, action: int, value: float) -> None:
        self.row_for(state)[action] = value

    def insert(self, state: int, values: Sequence[float]) -> None:
        """
        Add a complete row for a state that has none yet.

        Raises
        ------
        KeyError
            If ``state`` already has a row
        ValueError
            If ``values`` does not hold exactly ``num_actions`` entries
        """
        if state in self._rows:
            raise KeyError(f"state {state} already has a value row")
        row = np.array(values, dtype=np.float64)
        if row.shape != (self.num_actions,):
            raise ValueError(
                f"value row must have {self.num_actions} entries, got shape {row.shape}"
            )
        self._rows[state] = row

    def clear(self) -> None:
        self._rows.clear()

    def items(self) -> Iterator[Tuple[int, FloatArray]]:
        return iter(self._rows.items())

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, state: int) -> bool:
        return state in self._rows
