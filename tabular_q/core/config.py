"""
Configuration for the Tabular Q-Learning Agent.

Core Idea (核心思想)
====================
使用dataclass集中管理智能体的构造参数，通过__post_init__进行验证。
All values except ``epsilon`` are fixed for the agent's lifetime; epsilon is
only the starting exploration rate and may be annealed on the agent.

Hyperparameters
===============
- **num_actions**: size of the discrete action space |A|
- **gamma (γ)**: discount factor in the TD target r + γ max_a' Q(s', a')
- **initial_value**: Q(s, a) assigned the first time s is seen. High values
  give optimistic initialization (systematic exploration), low values a
  pessimistic one.
- **alpha (α)**: learning rate, Q ← Q + α (target − Q)
- **epsilon (ε)**: probability of a uniformly random action
- **seed**: seed for the agent's private random generator

Example:
    >>> config = QLearnerConfig(num_actions=4, gamma=0.9, alpha=0.5)
    >>> config.epsilon
    0.1
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class QLearnerConfig:
    """
    Construction parameters for :class:`~tabular_q.agents.QLearner`.

    Attributes
    ----------
    num_actions : int
        Number of discrete actions
    gamma : float, default=0.99
        Discount factor γ ∈ [0, 1]
    initial_value : float, default=0.0
        Initial Q-value for every newly seen state-action pair
    alpha : float, default=0.1
        Learning rate α ∈ (0, 1]
    epsilon : float, default=0.1
        Initial exploration rate ε ∈ [0, 1]
    seed : Optional[int], default=None
        Random generator seed (None draws fresh OS entropy)
    strict_episodes : bool, default=True
        If True, calling ``first_action`` while an episode is pending raises
        :class:`UsageError`. If False, the pending pair is dropped silently.

    Raises
    ------
    ValueError
        If any parameter is outside its valid range
    """

    num_actions: int
    gamma: float = 0.99
    initial_value: float = 0.0
    alpha: float = 0.1
    epsilon: float = 0.1
    seed: Optional[int] = None
    strict_episodes: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.num_actions, bool) or int(self.num_actions) != self.num_actions:
            raise ValueError(
                f"num_actions must be an integer, got {self.num_actions}"
            )
        if self.num_actions <= 0:
            raise ValueError(
                f"num_actions must be positive, got {self.num_actions}"
            )
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        validate_epsilon(self.epsilon)
        if not math.isfinite(self.initial_value):
            raise ValueError(
                f"initial_value must be finite, got {self.initial_value}"
            )
        self.num_actions = int(self.num_actions)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary view, used for logging and reports."""
        return asdict(self)


def validate_epsilon(epsilon: float) -> float:
    """Return ``epsilon`` unchanged or raise ``ValueError`` if outside [0, 1]."""
    if not 0.0 <= epsilon <= 1.0:
        raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
    return epsilon
