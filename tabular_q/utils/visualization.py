"""
Visualization Utilities.

Plotting helpers for learned value functions and training curves.
matplotlib is an optional dependency (``pip install tabular-q[plot]``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from tabular_q.agents.q_learner import QLearner
from tabular_q.core.types import Sensation
from tabular_q.training.runner import TrainingMetrics
from tabular_q.utils.diagnostics import value_surface


def _pyplot():
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib required for plotting. "
            "Install with: pip install matplotlib"
        )
    return plt


def plot_value_surface(
    agent: QLearner,
    x_range: Tuple[int, int],
    y_range: Tuple[int, int],
    base: Optional[Sensation] = None,
    dims: Tuple[int, int] = (0, 1),
    title: str = "State Values V(s) = max_a Q(s, a)",
    save_path: Optional[Union[str, Path]] = None,
    show: bool = True,
) -> np.ndarray:
    """
    Heatmap of the value surface over a 2-D slice.

    Parameters
    ----------
    agent : QLearner
        Agent whose table is plotted
    x_range, y_range : Tuple[int, int]
        Inclusive integer ranges for the two varying features
    base : Optional[Sensation]
        Values of the remaining features
    dims : Tuple[int, int], default=(0, 1)
        Indices of the varying features
    title : str
        Plot title
    save_path : Optional[Union[str, Path]]
        Path to save figure
    show : bool, default=True
        Whether to display plot

    Returns
    -------
    np.ndarray
        The plotted surface
    """
    plt = _pyplot()
    surface = value_surface(agent, x_range, y_range, base=base, dims=dims)

    fig, ax = plt.subplots(figsize=(7, 6))
    im = ax.imshow(
        surface,
        cmap="viridis",
        origin="upper",
        extent=(y_range[0] - 0.5, y_range[1] + 0.5, x_range[1] + 0.5, x_range[0] - 0.5),
    )
    fig.colorbar(im, ax=ax, label="V(s)")
    ax.set_xlabel(f"feature {dims[1]}")
    ax.set_ylabel(f"feature {dims[0]}")
    ax.set_title(title)
    plt.tight_layout()

    if save_path is not None:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)
    return surface


def plot_learning_curve(
    metrics: TrainingMetrics,
    window: int = 20,
    title: str = "Q-Learning Training",
    save_path: Optional[Union[str, Path]] = None,
    show: bool = True,
) -> None:
    """Episode rewards with moving average, and the epsilon schedule."""
    plt = _pyplot()
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))

    ax1.plot(metrics.episode_rewards, alpha=0.3, color="blue", label="Raw")
    smoothed = metrics.get_moving_average(window)
    offset = len(metrics.episode_rewards) - len(smoothed)
    ax1.plot(np.arange(offset, offset + len(smoothed)), smoothed,
             color="blue", linewidth=2, label=f"Smoothed ({window})")
    ax1.set_xlabel("Episode")
    ax1.set_ylabel("Reward")
    ax1.set_title("Episode Rewards")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    ax2.plot(metrics.epsilon_history, color="purple")
    ax2.set_xlabel("Episode")
    ax2.set_ylabel("Epsilon")
    ax2.set_title("Exploration Rate")
    ax2.grid(True, alpha=0.3)

    fig.suptitle(title, fontsize=14)
    plt.tight_layout()

    if save_path is not None:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)
