"""
Q-Learning Agent with Canonicalized Sensations.

Core Idea (核心思想)
====================
Straight one-step Q-learning over a lookup table, with no generalization
between states and epsilon-greedy exploration. Sensations are canonicalized
into integer handles by a :class:`StateSpace`; the :class:`ValueTable` holds
one row of action values per handle.

Mathematical Theory (数学原理)
==============================
For the pending pair (s, a), reward r and successor s':

    non-terminal:  target = r + γ max_a' Q(s', a')
    terminal:      target = r
    update:        Q(s, a) ← Q(s, a) + α (target − Q(s, a))

Action selection (ε-greedy):

    a = uniform{0, ..., |A|-1}        with probability ε
    a = uniform{argmax_a Q(s, a)}     otherwise

Ties in the argmax are broken uniformly at random. Without this a freshly
initialized (symmetric) row would always yield action 0.

Episode State Machine (回合状态机)
==================================
::

    NoEpisode --first_action--> InEpisode --next_action--> InEpisode
        ^                           |
        +------last_action----------+
        +------end_episode----------+

Complexity:
    - Per step: O(k) canonicalization + O(|A|) for max / argmax
    - Memory: O(|S| × (k + |A|)) for |S| distinct sensations
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import numpy as np

from tabular_q.agents.base import Agent
from tabular_q.core.config import QLearnerConfig, validate_epsilon
from tabular_q.core.exceptions import UsageError
from tabular_q.core.state_space import StateSpace
from tabular_q.core.types import Experience, FloatArray, Sensation
from tabular_q.core.value_table import ValueTable
from tabular_q.persistence import policy_file

logger = logging.getLogger(__name__)


class QLearner(Agent):
    """
    Tabular Q-learning agent driven one step at a time.

    Supports two ways of construction, as with the other agents:
    pass a :class:`QLearnerConfig`, or pass the individual parameters.

    Attributes
    ----------
    config : QLearnerConfig
        Construction parameters
    state_space : StateSpace
        Registry of every distinct sensation seen so far
    q_table : ValueTable
        Action values keyed by state handle
    rng : numpy.random.Generator
        Source of every exploratory draw and tie-break
    debug : bool
        Whether per-step decisions are logged at DEBUG level

    Example:
        >>> agent = QLearner(num_actions=2, gamma=0.9, alpha=0.5, epsilon=0.0, seed=0)
        >>> a0 = agent.first_action([0.0, 0.0])
        >>> a1 = agent.next_action(1.0, [1.0, 1.0])
        >>> agent.last_action(0.0)
    """

    def __init__(
        self,
        config: Optional[QLearnerConfig] = None,
        num_actions: int = 4,
        gamma: float = 0.99,
        initial_value: float = 0.0,
        alpha: float = 0.1,
        epsilon: float = 0.1,
        seed: Optional[int] = None,
    ) -> None:
        if config is None:
            config = QLearnerConfig(
                num_actions=num_actions,
                gamma=gamma,
                initial_value=initial_value,
                alpha=alpha,
                epsilon=epsilon,
                seed=seed,
            )
        self.config = config
        self._num_actions = config.num_actions
        self._gamma = float(config.gamma)
        self._alpha = float(config.alpha)
        self._initial_value = float(config.initial_value)
        self._epsilon = float(config.epsilon)

        self.rng = np.random.default_rng(config.seed)
        self.state_space = StateSpace()
        self.q_table = ValueTable(self._num_actions, self._initial_value)

        # (state handle, action) awaiting its update, None outside an episode
        self._pending: Optional[Tuple[int, int]] = None
        self.debug = False
        self.total_steps = 0
        self.total_updates = 0

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def num_actions(self) -> int:
        return self._num_actions

    @property
    def gamma(self) -> float:
        return self._gamma

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def initial_value(self) -> float:
        return self._initial_value

    @property
    def epsilon(self) -> float:
        """Exploration rate; may be reassigned between steps for annealing."""
        return self._epsilon

    @epsilon.setter
    def epsilon(self, value: float) -> None:
        self._epsilon = float(validate_epsilon(value))

    @property
    def in_episode(self) -> bool:
        return self._pending is not None

    @property
    def num_states(self) -> int:
        return len(self.state_space)

    # ------------------------------------------------------------------
    # Driver contract
    # ------------------------------------------------------------------

    def first_action(self, sensation: Sensation) -> int:
        """
        Start an episode.

        Raises
        ------
        UsageError
            If an episode is already pending and ``config.strict_episodes``
            is set
        """
        if self._pending is not None:
            if self.config.strict_episodes:
                raise UsageError(
                    "first_action called while an episode is in progress; "
                    "call last_action or end_episode first"
                )
            logger.debug("Dropping pending pair %s on episode restart", self._pending)
            self._pending = None

        state = self.state_space.canonicalize(sensation)
        action = self._choose(state)
        self._pending = (state, action)
        return action

    def next_action(self, reward: float, sensation: Sensation) -> int:
        """Update the pending pair towards r + γ max Q(s', ·) and act in s'."""
        prev_state, prev_action = self._require_pending("next_action")

        state = self.state_space.canonicalize(sensation)
        best_next = float(np.max(self.q_table.row_for(state)))
        self._update(prev_state, prev_action, reward + self._gamma * best_next)

        action = self._choose(state)
        self._pending = (state, action)
        return action

    def last_action(self, reward: float) -> None:
        """Terminal update towards ``reward`` alone, then leave the episode."""
        prev_state, prev_action = self._require_pending("last_action")
        self._update(prev_state, prev_action, float(reward))
        self._pending = None

    def end_episode(self) -> None:
        """Drop the pending pair without learning, e.g. at a step limit."""
        self._pending = None

    def set_debug(self, debug: bool) -> None:
        self.debug = bool(debug)

    # ------------------------------------------------------------------
    # Offline learning
    # ------------------------------------------------------------------

    def seed_experience(self, experiences: Iterable[Experience]) -> None:
        """
        Replay recorded transitions through the update rule, in order.

        No actions are selected, so neither the random generator nor the
        episode state is touched.

        Args:
            experiences: Iterable of :class:`Experience` (or equivalent
                5-tuples ``(sensation, action, reward, next_sensation, terminal)``)

        Raises:
            UsageError: If an action index is outside ``[0, num_actions)``
        """
        count = 0
        for sensation, action, reward, next_sensation, terminal in experiences:
            action = self._check_action(action)
            state = self.state_space.canonicalize(sensation)
            self.q_table.row_for(state)
            if terminal:
                target = float(reward)
            else:
                next_state = self.state_space.canonicalize(next_sensation)
                target = reward + self._gamma * float(np.max(self.q_table.row_for(next_state)))
            self._update(state, action, target)
            count += 1
        logger.info(f"Seeded value table from {count} experiences ({self.num_states} states)")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_value(self, sensation: Sensation) -> float:
        """
        State value V(s) = max_a Q(s, a).

        Unseen sensations are not registered; they report ``initial_value``.
        """
        row = self._lookup_row(sensation)
        if row is None:
            return self._initial_value
        return float(np.max(row))

    def get_q_values(self, sensation: Sensation) -> FloatArray:
        """Copy of the value row for ``sensation`` (initial values if unseen)."""
        row = self._lookup_row(sensation)
        if row is None:
            return np.full(self._num_actions, self._initial_value, dtype=np.float64)
        return row.copy()

    def greedy_action(self, sensation: Sensation) -> Optional[int]:
        """Lowest-index argmax action for a seen state, None otherwise. No random draws."""
        row = self._lookup_row(sensation)
        if row is None:
            return None
        return int(np.argmax(row))

    def get_stats(self) -> Dict[str, Any]:
        return {
            "num_states": self.num_states,
            "epsilon": self._epsilon,
            "total_steps": self.total_steps,
            "total_updates": self.total_updates,
            "in_episode": self.in_episode,
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_policy(self, filepath: Union[str, Path]) -> None:
        """Write every state's features and value row to ``filepath``."""
        policy_file.write_policy(filepath, self.state_space, self.q_table)
        logger.info(f"Saved policy with {self.num_states} states to {filepath}")

    def load_policy(self, filepath: Union[str, Path]) -> None:
        """
        Replace the state space and value table with the snapshot in ``filepath``.

        Any episode in progress is abandoned. If reading fails the current
        table is kept.

        Raises:
            OSError: If the file cannot be read
            PolicyFileError: If the file is malformed or was written for a
                different number of actions
        """
        state_space, q_table = policy_file.read_policy(
            filepath, self._num_actions, self._initial_value
        )
        self.state_space = state_space
        self.q_table = q_table
        self._pending = None
        logger.info(f"Loaded policy with {self.num_states} states from {filepath}")

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    def __copy__(self):
        raise TypeError("QLearner cannot be copied implicitly; use clone()")

    def __deepcopy__(self, memo):
        raise TypeError("QLearner cannot be copied implicitly; use clone()")

    def clone(self, seed: Optional[int] = None) -> "QLearner":
        """
        Independent agent holding a deep copy of the learned table.

        Args:
            seed: Seed for the clone's generator. If None, the clone continues
                from a copy of this agent's generator state.

        Returns:
            New agent outside of any episode
        """
        twin = QLearner(replace(self.config, epsilon=self._epsilon, seed=seed))
        for handle in self.state_space:
            twin.state_space.canonicalize(self.state_space.features(handle))
            row = self.q_table.get(handle)
            if row is not None:
                twin.q_table.insert(handle, row.copy())
        if seed is None:
            twin.rng.bit_generator.state = self.rng.bit_generator.state
        twin.debug = self.debug
        return twin

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _choose(self, state: int) -> int:
        row = self.q_table.row_for(state)
        if self.rng.random() < self._epsilon:
            action = int(self.rng.integers(self._num_actions))
            explored = True
        else:
            action = self._random_argmax(row)
            explored = False

        self.total_steps += 1
        if self.debug:
            logger.debug(
                f"state={state} features={self.state_space.features(state).tolist()} "
                f"Q={row.tolist()} action={action} explored={explored}"
            )
        return action

    def _random_argmax(self, row: FloatArray) -> int:
        best = np.flatnonzero(row == np.max(row))
        if len(best) == 1:
            return int(best[0])
        return int(best[self.rng.integers(len(best))])

    def _update(self, state: int, action: int, target: float) -> None:
        row = self.q_table.row_for(state)
        row[action] = row[action] + self._alpha * (target - row[action])
        self.total_updates += 1

    def _require_pending(self, method: str) -> Tuple[int, int]:
        if self._pending is None:
            raise UsageError(f"{method} called with no episode in progress; call first_action first")
        return self._pending

    def _check_action(self, action: int) -> int:
        if not 0 <= action < self._num_actions:
            raise UsageError(
                f"action must be in [0, {self._num_actions}), got {action}"
            )
        return int(action)

    def _lookup_row(self, sensation: Sensation) -> Optional[FloatArray]:
        handle = self.state_space.lookup(sensation)
        if handle is None:
            return None
        return self.q_table.get(handle)
