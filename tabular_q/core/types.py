"""
Type Definitions for the Tabular Q-Learning Agent.

Core Idea (核心思想)
====================
Sensations arrive from the environment as arbitrary float sequences and are
frozen into read-only ``float64`` arrays on entry. Experience tuples reuse
the MDP transition layout:

    τ_t = (s_t, a_t, r_t, s_{t+1}, d_t)

where d_t marks a terminal transition (no bootstrap term).
"""

from __future__ import annotations

from typing import Any, NamedTuple, Protocol, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray


FloatArray = NDArray[np.float64]
"""Float-valued NumPy array used for sensations and value rows."""

Sensation = Union[Sequence[float], FloatArray]
"""Anything that can be read as a 1-D float vector."""


class Experience(NamedTuple):
    """
    One recorded transition used to warm-start the value table.

    Attributes
    ----------
    sensation : Sensation
        Observation in which the action was taken
    action : int
        Action index in ``[0, num_actions)``
    reward : float
        Reward observed after the action
    next_sensation : Sensation
        Observation that followed; ignored when ``terminal`` is True
    terminal : bool
        True if the transition ended the episode

    Examples
    --------
    >>> exp = Experience([0.0, 0.0], 1, -1.0, [0.0, 1.0], False)
    >>> exp.action
    1
    """
    sensation: Sensation
    action: int
    reward: float
    next_sensation: Sensation
    terminal: bool


class Environment(Protocol):
    """Environment side of the agent/environment loop."""

    def reset(self) -> Any:
        """Start a new episode and return the first sensation."""
        ...

    def step(self, action: int) -> Tuple[Any, float, bool]:
        """Apply ``action`` and return ``(sensation, reward, terminal)``."""
        ...


def as_sensation(values: Sensation) -> FloatArray:
    """
    Freeze ``values`` into a read-only 1-D float64 array.

    A fresh copy is always made so later mutation of the caller's buffer
    cannot change a stored state.
    """
    arr = np.array(values, dtype=np.float64, copy=True)
    arr.setflags(write=False)
    return arr
