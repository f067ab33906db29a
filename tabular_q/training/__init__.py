"""
Training Module.

    - run_episode: drive one episode through the agent contract
    - train: multi-episode loop with epsilon decay and progress logging
    - TrainingConfig, TrainingMetrics: loop parameters and collected statistics
"""

from tabular_q.training.runner import (
    TrainingConfig,
    TrainingMetrics,
    run_episode,
    train,
)

__all__ = ["TrainingConfig", "TrainingMetrics", "run_episode", "train"]
