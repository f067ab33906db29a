"""
Environments Module.

    - GridWorld, GridWorldConfig: deterministic grid navigation with
      ``[row, col]`` sensations
"""

from tabular_q.envs.grid_world import GridWorld, GridWorldConfig

__all__ = ["GridWorld", "GridWorldConfig"]
