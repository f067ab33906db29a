"""
GridWorld Environment.

A deterministic N×N navigation task used to exercise the agent end to end.
The sensation is the agent's position as a float vector ``[row, col]``, so
every cell becomes one canonical state.

Dynamics:
    - Actions 0-3 move up, down, left, right
    - Moving off the grid or into an obstacle leaves the agent in place
    - Every move costs ``step_reward``; entering the goal yields
      ``goal_reward`` and ends the episode
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

Cell = Tuple[int, int]


@dataclass
class GridWorldConfig:
    """
    Configuration parameters for GridWorld.

    Attributes:
        size: Grid dimension (size × size)
        start: Starting cell (row, column)
        goal: Terminal cell
        obstacles: Impassable cells
        step_reward: Reward for each non-terminal move
        goal_reward: Reward for entering the goal

    Example:
        >>> config = GridWorldConfig(size=4, goal=(3, 3), obstacles=[(1, 1)])
    """
    size: int = 4
    start: Cell = (0, 0)
    goal: Cell = (3, 3)
    obstacles: List[Cell] = field(default_factory=list)
    step_reward: float = -1.0
    goal_reward: float = 0.0

    def __post_init__(self) -> None:
        if self.size < 2:
            raise ValueError(f"Grid size must be >= 2, got: {self.size}")
        for name, cell in (("start", self.start), ("goal", self.goal)):
            if not all(0 <= c < self.size for c in cell):
                raise ValueError(f"{name} must lie inside the grid, got: {cell}")
            if tuple(cell) in {tuple(o) for o in self.obstacles}:
                raise ValueError(f"{name} cannot be an obstacle, got: {cell}")
        if tuple(self.start) == tuple(self.goal):
            raise ValueError("start and goal must differ")


class GridWorld:
    """
    Deterministic grid navigation environment.

    Example:
        >>> env = GridWorld(GridWorldConfig(size=3, goal=(2, 2)))
        >>> env.reset()
        array([0., 0.])
        >>> sensation, reward, terminal = env.step(1)
    """

    ACTIONS: List[Cell] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
    ACTION_NAMES: List[str] = ["up", "down", "left", "right"]

    def __init__(self, config: Optional[GridWorldConfig] = None) -> None:
        self.config = config or GridWorldConfig()
        self.num_actions = len(self.ACTIONS)
        self._obstacles = {tuple(o) for o in self.config.obstacles}
        self.position: Cell = tuple(self.config.start)

    @property
    def num_cells(self) -> int:
        return self.config.size ** 2 - len(self._obstacles)

    def reset(self) -> np.ndarray:
        self.position = tuple(self.config.start)
        return self._sensation()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool]:
        dr, dc = self.ACTIONS[action]
        row = int(np.clip(self.position[0] + dr, 0, self.config.size - 1))
        col = int(np.clip(self.position[1] + dc, 0, self.config.size - 1))
        if (row, col) not in self._obstacles:
            self.position = (row, col)

        if self.position == tuple(self.config.goal):
            return self._sensation(), self.config.goal_reward, True
        return self._sensation(), self.config.step_reward, False

    def shortest_path_length(self) -> int:
        """Breadth-first distance from start to goal (-1 if unreachable)."""
        start, goal = tuple(self.config.start), tuple(self.config.goal)
        frontier, seen, depth = [start], {start}, 0
        while frontier:
            if goal in frontier:
                return depth
            nxt = []
            for r, c in frontier:
                for dr, dc in self.ACTIONS:
                    cell = (r + dr, c + dc)
                    if (
                        0 <= cell[0] < self.config.size
                        and 0 <= cell[1] < self.config.size
                        and cell not in self._obstacles
                        and cell not in seen
                    ):
                        seen.add(cell)
                        nxt.append(cell)
            frontier, depth = nxt, depth + 1
        return -1

    def _sensation(self) -> np.ndarray:
        return np.array(self.position, dtype=np.float64)
