"""
Episode Driver and Training Loop.

Drives any :class:`~tabular_q.agents.Agent` against any environment
implementing ``reset()`` / ``step(action)``:

    a = agent.first_action(env.reset())
    loop:
        s, r, terminal = env.step(a)
        if terminal: agent.last_action(r); stop
        a = agent.next_action(r, s)
    step limit reached: agent.end_episode()

An episode cut off by the step limit is not terminal: its last transition is
bootstrapped through ``next_action`` like any other, and only the pair chosen
after it is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from tabular_q.agents.base import Agent
from tabular_q.core.types import Environment

logger = logging.getLogger(__name__)


@dataclass
class TrainingConfig:
    """
    Training loop parameters.

    Attributes:
        episodes: Number of episodes to run
        max_steps: Step limit per episode
        epsilon_decay: Multiplicative decay applied to epsilon after each episode
        epsilon_min: Floor for the decayed epsilon
        log_interval: Episodes between progress log lines (0 disables)
    """
    episodes: int = 500
    max_steps: int = 200
    epsilon_decay: float = 1.0
    epsilon_min: float = 0.0
    log_interval: int = 100

    def __post_init__(self) -> None:
        if self.episodes <= 0:
            raise ValueError(f"episodes must be positive, got {self.episodes}")
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")
        if not 0.0 < self.epsilon_decay <= 1.0:
            raise ValueError(f"epsilon_decay must be in (0, 1], got {self.epsilon_decay}")
        if not 0.0 <= self.epsilon_min <= 1.0:
            raise ValueError(f"epsilon_min must be in [0, 1], got {self.epsilon_min}")
        if self.log_interval < 0:
            raise ValueError(f"log_interval must be non-negative, got {self.log_interval}")


@dataclass
class TrainingMetrics:
    """
    Per-episode training record.

    Attributes:
        episode_rewards: Undiscounted return of each episode
        episode_lengths: Steps taken in each episode
        epsilon_history: Epsilon in effect during each episode
        terminated: Whether each episode reached a terminal state
    """

    episode_rewards: List[float] = field(default_factory=list)
    episode_lengths: List[int] = field(default_factory=list)
    epsilon_history: List[float] = field(default_factory=list)
    terminated: List[bool] = field(default_factory=list)

    def get_moving_average(self, window: int = 100) -> np.ndarray:
        if len(self.episode_rewards) < window:
            return np.array(self.episode_rewards)
        return np.convolve(
            self.episode_rewards, np.ones(window) / window, mode="valid"
        )

    def get_statistics(self, last_n: int = 100) -> Dict[str, float]:
        """Mean/std/max/min reward, mean steps and success rate over the last ``last_n`` episodes."""
        rewards = self.episode_rewards[-last_n:] if self.episode_rewards else []
        steps = self.episode_lengths[-last_n:] if self.episode_lengths else []
        done = self.terminated[-last_n:] if self.terminated else []

        return {
            "mean_reward": float(np.mean(rewards)) if rewards else 0.0,
            "std_reward": float(np.std(rewards)) if rewards else 0.0,
            "max_reward": float(np.max(rewards)) if rewards else 0.0,
            "min_reward": float(np.min(rewards)) if rewards else 0.0,
            "mean_steps": float(np.mean(steps)) if steps else 0.0,
            "success_rate": float(np.mean(done)) if done else 0.0,
        }


def run_episode(agent: Agent, env: Environment, max_steps: int = 200) -> Tuple[float, int, bool]:
    """
    Run one episode through the driver contract.

    Args:
        agent: Agent to drive
        env: Environment to act in
        max_steps: Step limit

    Returns:
        ``(total_reward, steps, terminated)``
    """
    action = agent.first_action(env.reset())
    total_reward = 0.0

    for step in range(1, max_steps + 1):
        sensation, reward, terminal = env.step(action)
        total_reward += reward
        if terminal:
            agent.last_action(reward)
            return total_reward, step, True
        action = agent.next_action(reward, sensation)

    agent.end_episode()
    return total_reward, max_steps, False


def train(agent: Agent, env: Environment, config: Optional[TrainingConfig] = None) -> TrainingMetrics:
    """
    Train ``agent`` on ``env`` for ``config.episodes`` episodes.

    The agent's ``epsilon`` (if it has one) is decayed after every episode.

    Returns:
        Collected :class:`TrainingMetrics`
    """
    config = config or TrainingConfig()
    metrics = TrainingMetrics()
    has_epsilon = hasattr(agent, "epsilon")

    for episode in range(config.episodes):
        epsilon = agent.epsilon if has_epsilon else 0.0
        total_reward, steps, terminated = run_episode(agent, env, config.max_steps)

        metrics.episode_rewards.append(total_reward)
        metrics.episode_lengths.append(steps)
        metrics.epsilon_history.append(epsilon)
        metrics.terminated.append(terminated)

        if has_epsilon and agent.epsilon > config.epsilon_min:
            agent.epsilon = max(config.epsilon_min, agent.epsilon * config.epsilon_decay)

        if config.log_interval and (episode + 1) % config.log_interval == 0:
            stats = metrics.get_statistics(config.log_interval)
            logger.info(
                f"Episode {episode + 1:5d} | "
                f"Avg Reward: {stats['mean_reward']:8.2f} | "
                f"Avg Steps: {stats['mean_steps']:6.1f} | "
                f"Success: {stats['success_rate'] * 100:5.1f}% | "
                f"ε: {epsilon:.4f}"
            )

    return metrics
