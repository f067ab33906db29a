"""
Agents Module.

    - Agent: abstract first_action / next_action / last_action contract
    - QLearner: tabular Q-learning with epsilon-greedy exploration
"""

from tabular_q.agents.base import Agent
from tabular_q.agents.q_learner import QLearner

__all__ = ["Agent", "QLearner"]
