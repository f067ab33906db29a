#!/usr/bin/env python3
"""
Tabular Q-Learning: Command Line Entry Point

Usage:
    tabular-q train --size 5 --episodes 300 --output policy.txt
    tabular-q inspect policy.txt --surface 0 4 0 4
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from tabular_q.agents.q_learner import QLearner
from tabular_q.core.config import QLearnerConfig
from tabular_q.envs.grid_world import GridWorld, GridWorldConfig
from tabular_q.persistence.policy_file import read_dims
from tabular_q.training.runner import TrainingConfig, run_episode, train
from tabular_q.utils.diagnostics import dump_q, write_value_surface

logger = logging.getLogger("tabular_q")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def cmd_train(args: argparse.Namespace) -> int:
    env = GridWorld(GridWorldConfig(size=args.size, goal=(args.size - 1, args.size - 1)))
    config = QLearnerConfig(
        num_actions=env.num_actions,
        gamma=args.gamma,
        initial_value=args.initial_value,
        alpha=args.alpha,
        epsilon=args.epsilon,
        seed=args.seed,
    )
    agent = QLearner(config)
    agent.set_debug(args.verbose)

    logger.info("=" * 60)
    logger.info(f"Training on {args.size}x{args.size} GridWorld")
    logger.info(f"Agent config: {config.to_dict()}")
    logger.info("=" * 60)

    metrics = train(
        agent,
        env,
        TrainingConfig(
            episodes=args.episodes,
            max_steps=args.max_steps,
            epsilon_decay=args.epsilon_decay,
            epsilon_min=args.epsilon_min,
            log_interval=max(1, args.episodes // 10),
        ),
    )
    stats = metrics.get_statistics(last_n=max(1, args.episodes // 10))
    logger.info(f"Final stats: {stats}")

    agent.epsilon = 0.0
    reward, steps, terminated = run_episode(agent, env, args.max_steps)
    logger.info(
        f"Greedy episode: reward={reward:.1f} steps={steps} "
        f"(shortest path {env.shortest_path_length()}, terminated={terminated})"
    )

    agent.save_policy(args.output)
    if args.plot:
        from tabular_q.utils.visualization import plot_value_surface
        plot_value_surface(
            agent, (0, args.size - 1), (0, args.size - 1),
            save_path=args.plot, show=False,
        )
        logger.info(f"Value surface saved to {args.plot}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    try:
        num_actions = args.num_actions
        if num_actions is None:
            _, num_actions = read_dims(args.policy)
        agent = QLearner(QLearnerConfig(num_actions=num_actions))
        agent.load_policy(args.policy)
    except OSError as e:
        logger.error(f"Cannot read policy: {e}")
        return 1

    print(f"{agent.num_states} states, {agent.num_actions} actions")
    dump_q(agent, sys.stdout)
    if args.surface:
        xmin, xmax, ymin, ymax = args.surface
        print("\nValue surface (x y V):")
        write_value_surface(sys.stdout, agent, (xmin, xmax), (ymin, ymax))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabular-q",
        description="Tabular Q-learning with canonicalized sensations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    tabular-q train --episodes 300 --output policy.txt
    tabular-q train --output policy.npz --plot values.png
    tabular-q inspect policy.txt --surface 0 3 0 3
        """
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_train = sub.add_parser("train", help="Train on a GridWorld and save the policy")
    p_train.add_argument("--size", type=int, default=4, help="Grid size")
    p_train.add_argument("--episodes", type=int, default=300, help="Training episodes")
    p_train.add_argument("--max-steps", type=int, default=200, help="Step limit per episode")
    p_train.add_argument("--alpha", type=float, default=0.5, help="Learning rate")
    p_train.add_argument("--gamma", type=float, default=0.95, help="Discount factor")
    p_train.add_argument("--epsilon", type=float, default=0.2, help="Initial exploration rate")
    p_train.add_argument("--epsilon-decay", type=float, default=0.99, help="Per-episode epsilon decay")
    p_train.add_argument("--epsilon-min", type=float, default=0.01, help="Epsilon floor")
    p_train.add_argument("--initial-value", type=float, default=0.0, help="Initial Q-value")
    p_train.add_argument("--seed", type=int, default=42, help="Random seed")
    p_train.add_argument("--output", default="policy.txt", help="Policy file (.npz for binary)")
    p_train.add_argument("--plot", default=None, help="Save a value-surface plot to this path")
    p_train.set_defaults(func=cmd_train)

    p_inspect = sub.add_parser("inspect", help="Print a saved policy")
    p_inspect.add_argument("policy", help="Policy file to read")
    p_inspect.add_argument(
        "--num-actions", type=int, default=None,
        help="Expected actions per state (default: read from the file)",
    )
    p_inspect.add_argument(
        "--surface", type=int, nargs=4, metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
        help="Also print V over a 2-D slice",
    )
    p_inspect.set_defaults(func=cmd_inspect)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with argument parsing."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
