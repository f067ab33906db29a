"""
Agent Interface.

Declares the call contract an agent/environment driver relies on. A driver
starts every episode with ``first_action``, reports each intermediate reward
through ``next_action`` and closes a terminal episode with ``last_action``:

    a_0 = agent.first_action(s_0)
    a_1 = agent.next_action(r_1, s_1)
    ...
    agent.last_action(r_T)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Union

from tabular_q.core.types import Experience, Sensation


class Agent(ABC):
    """Abstract step-driven reinforcement learning agent."""

    @abstractmethod
    def first_action(self, sensation: Sensation) -> int:
        """Begin an episode in ``sensation`` and return the action to take."""

    @abstractmethod
    def next_action(self, reward: float, sensation: Sensation) -> int:
        """Learn from ``reward``, move to ``sensation`` and return the next action."""

    @abstractmethod
    def last_action(self, reward: float) -> None:
        """Learn from the final ``reward`` of a terminal episode."""

    @abstractmethod
    def end_episode(self) -> None:
        """Abandon the current episode without learning from it."""

    @abstractmethod
    def set_debug(self, debug: bool) -> None:
        """Toggle per-step debug logging."""

    @abstractmethod
    def seed_experience(self, experiences: Iterable[Experience]) -> None:
        """Warm-start from recorded transitions."""

    @abstractmethod
    def save_policy(self, filepath: Union[str, Path]) -> None:
        """Write the learned policy to ``filepath``."""

    @abstractmethod
    def load_policy(self, filepath: Union[str, Path]) -> None:
        """Replace the learned policy with the one stored in ``filepath``."""
