"""
Diagnostics for Learned Value Tables.

Text dumps of the state space and Q-table for debugging, plus a value
surface: V(s) = max_a Q(s, a) sampled over integer coordinates of a 2-D
slice of the sensation space. None of these functions register new states.
"""

from __future__ import annotations

import sys
from typing import List, Optional, Sequence, TextIO, Tuple

import numpy as np

from tabular_q.agents.q_learner import QLearner
from tabular_q.core.types import Sensation


def _format_vector(values: Sequence[float]) -> str:
    return "[" + ", ".join(f"{float(v):g}" for v in values) + "]"


def describe_state(agent: QLearner, sensation: Sensation) -> str:
    """One-line description of a sensation and its value row."""
    handle = agent.state_space.lookup(sensation)
    features = _format_vector(np.asarray(sensation, dtype=np.float64))
    if handle is None:
        return f"{features} (unseen)"
    return f"{features} state={handle} Q={_format_vector(agent.get_q_values(sensation))}"


def dump_state_space(agent: QLearner) -> List[str]:
    """Feature vector of every known state, in handle order."""
    space = agent.state_space
    return [_format_vector(space.features(handle)) for handle in space]


def dump_q(agent: QLearner, stream: Optional[TextIO] = None) -> None:
    """Write ``features -> Q-values`` for every state to ``stream`` (stdout by default)."""
    stream = stream or sys.stdout
    for handle in agent.state_space:
        features = agent.state_space.features(handle)
        stream.write(
            f"{_format_vector(features)} -> {_format_vector(agent.get_q_values(features))}\n"
        )


def value_surface(
    agent: QLearner,
    x_range: Tuple[int, int],
    y_range: Tuple[int, int],
    base: Optional[Sensation] = None,
    dims: Tuple[int, int] = (0, 1),
) -> np.ndarray:
    """
    Sample V(s) over a 2-D slice of the sensation space.

    Args:
        agent: Agent whose table is queried
        x_range: Inclusive ``(xmin, xmax)`` integer range for feature ``dims[0]``
        y_range: Inclusive ``(ymin, ymax)`` integer range for feature ``dims[1]``
        base: Sensation supplying the remaining features. Defaults to zeros
            of the agent's dimensionality (2 if no state has been seen).
        dims: Indices of the two features that vary

    Returns:
        Array of shape ``(xmax - xmin + 1, ymax - ymin + 1)`` where entry
        ``[i, j]`` is V at ``x = xmin + i``, ``y = ymin + j``. Unseen states
        report the agent's initial value.
    """
    if base is None:
        dimension = agent.state_space.dimension or 2
        template = np.zeros(dimension, dtype=np.float64)
    else:
        template = np.array(base, dtype=np.float64)
    if dims[0] == dims[1] or max(dims) >= len(template):
        raise ValueError(f"dims must be two distinct indices below {len(template)}, got {dims}")

    xs = range(x_range[0], x_range[1] + 1)
    ys = range(y_range[0], y_range[1] + 1)
    surface = np.empty((len(xs), len(ys)), dtype=np.float64)
    for i, x in enumerate(xs):
        for j, y in enumerate(ys):
            sensation = template.copy()
            sensation[dims[0]] = x
            sensation[dims[1]] = y
            surface[i, j] = agent.get_value(sensation)
    return surface


def write_value_surface(
    stream: TextIO,
    agent: QLearner,
    x_range: Tuple[int, int],
    y_range: Tuple[int, int],
    base: Optional[Sensation] = None,
    dims: Tuple[int, int] = (0, 1),
) -> None:
    """Write the value surface as ``x y value`` lines, x-major."""
    surface = value_surface(agent, x_range, y_range, base=base, dims=dims)
    for i, x in enumerate(range(x_range[0], x_range[1] + 1)):
        for j, y in enumerate(range(y_range[0], y_range[1] + 1)):
            stream.write(f"{x} {y} {surface[i, j]:.17g}\n")
