"""
Tabular Q-Learning.

A lookup-table Q-learning agent for step-driven agent/environment loops. The
environment hands the agent a fixed-length float feature vector (a
*sensation*) on every step and receives an integer action back.

Module Structure (模块结构)
===========================
::

    tabular_q/
    ├── core/           Configuration, tables and error types
    │   ├── config.py       QLearnerConfig
    │   ├── state_space.py  StateSpace (sensation → handle)
    │   ├── value_table.py  ValueTable (handle → Q row)
    │   ├── types.py        Experience, Environment, Sensation
    │   └── exceptions.py   UsageError, DimensionMismatchError, PolicyFileError
    ├── agents/         Agent contract and QLearner
    ├── persistence/    Policy snapshot files (text / .npz)
    ├── envs/           GridWorld
    ├── training/       run_episode, train
    └── utils/          Diagnostics and plots

Quick Start (快速开始)
======================
>>> from tabular_q import QLearner, GridWorld, train, TrainingConfig
>>> env = GridWorld()
>>> agent = QLearner(num_actions=env.num_actions, alpha=0.5, gamma=0.95, seed=0)
>>> metrics = train(agent, env, TrainingConfig(episodes=200))
>>> agent.save_policy("policy.txt")

References
==========
[1] Watkins, C. & Dayan, P. (1992). Q-learning. Machine Learning, 8, 279-292.
[2] Sutton & Barto, "Reinforcement Learning: An Introduction", 2018, Ch. 6.5
"""

from tabular_q.core import (
    DimensionMismatchError,
    Experience,
    PolicyFileError,
    QLearnerConfig,
    StateSpace,
    UsageError,
    ValueTable,
)
from tabular_q.agents import Agent, QLearner
from tabular_q.envs import GridWorld, GridWorldConfig
from tabular_q.persistence import read_policy, write_policy
from tabular_q.training import TrainingConfig, TrainingMetrics, run_episode, train

__version__ = "1.0.0"

__all__ = [
    "QLearnerConfig",
    "StateSpace",
    "ValueTable",
    "Experience",
    "UsageError",
    "DimensionMismatchError",
    "PolicyFileError",
    "Agent",
    "QLearner",
    "GridWorld",
    "GridWorldConfig",
    "read_policy",
    "write_policy",
    "TrainingConfig",
    "TrainingMetrics",
    "run_episode",
    "train",
]
