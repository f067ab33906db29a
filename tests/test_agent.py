"""
Unit Tests for QLearner.

Covers the update rule, epsilon-greedy selection with random tie-breaking,
the episode state machine, offline seeding and copy semantics.
"""

import copy

import numpy as np
import pytest

from tabular_q.agents.base import Agent
from tabular_q.agents.q_learner import QLearner
from tabular_q.core.config import QLearnerConfig
from tabular_q.core.exceptions import DimensionMismatchError, UsageError
from tabular_q.core.types import Experience
from tabular_q.envs.grid_world import GridWorld, GridWorldConfig
from tabular_q.training.runner import TrainingConfig, train


def make_agent(**overrides) -> QLearner:
    params = dict(num_actions=2, gamma=0.9, initial_value=0.0, alpha=0.5, epsilon=0.0, seed=0)
    params.update(overrides)
    return QLearner(QLearnerConfig(**params))


def table_snapshot(agent: QLearner) -> dict:
    return {
        tuple(agent.state_space.features(h).tolist()): agent.q_table.row_for(h).tolist()
        for h in agent.state_space
    }


class TestConstruction:
    """Tests for agent construction."""

    def test_config_object(self) -> None:
        agent = QLearner(QLearnerConfig(num_actions=3, gamma=0.8, alpha=0.2, initial_value=1.0))
        assert agent.num_actions == 3
        assert agent.gamma == 0.8
        assert agent.alpha == 0.2
        assert agent.initial_value == 1.0
        assert not agent.in_episode
        assert agent.num_states == 0

    def test_keyword_parameters(self) -> None:
        agent = QLearner(num_actions=5, gamma=0.5, epsilon=0.3, seed=1)
        assert agent.num_actions == 5
        assert agent.epsilon == 0.3
        assert agent.config.seed == 1

    def test_invalid_parameters(self) -> None:
        with pytest.raises(ValueError):
            QLearner(num_actions=0)

    def test_agent_interface_is_fully_abstract(self) -> None:
        class StepOnlyAgent(Agent):
            def first_action(self, sensation):
                return 0

            def next_action(self, reward, sensation):
                return 0

            def last_action(self, reward):
                pass

        with pytest.raises(TypeError):
            StepOnlyAgent()
        assert isinstance(make_agent(), Agent)

    def test_constants_are_read_only(self) -> None:
        agent = make_agent()
        with pytest.raises(AttributeError):
            agent.gamma = 0.5
        with pytest.raises(AttributeError):
            agent.alpha = 0.5

    def test_epsilon_is_mutable_and_validated(self) -> None:
        agent = make_agent(epsilon=0.5)
        agent.epsilon = 0.05
        assert agent.epsilon == 0.05
        with pytest.raises(ValueError):
            agent.epsilon = 1.5


class TestUpdateRule:
    """Tests for the Q-learning update."""

    def test_non_terminal_update(self) -> None:
        agent = make_agent(initial_value=0.0, alpha=0.5, gamma=0.9)
        a0 = agent.first_action([0.0, 0.0])
        agent.next_action(1.0, [1.0, 1.0])

        # Q = 0 + 0.5 * (1 + 0.9 * 0 - 0)
        assert agent.get_q_values([0.0, 0.0])[a0] == 0.5
        assert agent.get_q_values([0.0, 0.0])[1 - a0] == 0.0

    def test_non_terminal_update_with_nonzero_initial_value(self) -> None:
        initial, alpha, gamma, r = 2.0, 0.3, 0.7, -1.5
        agent = make_agent(initial_value=initial, alpha=alpha, gamma=gamma, num_actions=3)
        a0 = agent.first_action([0.0])
        agent.next_action(r, [1.0])

        expected = initial + alpha * (r + gamma * initial - initial)
        assert agent.get_q_values([0.0])[a0] == expected

    def test_bootstrap_uses_max_of_successor(self) -> None:
        agent = make_agent(alpha=1.0, gamma=0.5, num_actions=3)
        agent.seed_experience([Experience([1.0], 2, 4.0, None, True)])

        a0 = agent.first_action([0.0])
        agent.next_action(0.0, [1.0])
        assert agent.get_q_values([0.0])[a0] == 0.5 * 4.0

    def test_terminal_update_has_no_bootstrap(self) -> None:
        agent = make_agent(initial_value=10.0, alpha=0.5, gamma=0.9)
        a0 = agent.first_action([0.0, 0.0])
        agent.last_action(2.0)

        # target = r, regardless of any successor value
        assert agent.get_q_values([0.0, 0.0])[a0] == 10.0 + 0.5 * (2.0 - 10.0)
        assert not agent.in_episode

    def test_scenario_two_step(self) -> None:
        agent = make_agent(num_actions=2, gamma=0.9, initial_value=0.0, alpha=0.5, epsilon=0.0)
        a0 = agent.first_action([0.0, 0.0])
        assert a0 in (0, 1)

        a1 = agent.next_action(1.0, [1.0, 1.0])
        assert a1 in (0, 1)
        assert agent.get_q_values([0.0, 0.0])[a0] == 0.5
        np.testing.assert_array_equal(agent.get_q_values([1.0, 1.0]), [0.0, 0.0])
        assert agent.num_states == 2

    def test_self_loop_update(self) -> None:
        agent = make_agent(alpha=0.5, gamma=0.9, num_actions=1)
        agent.first_action([0.0])
        agent.next_action(1.0, [0.0])
        # max over the same row before its update: 0.5 * (1 + 0.9 * 0)
        assert agent.get_q_values([0.0])[0] == 0.5


class TestActionSelection:
    """Tests for epsilon-greedy selection."""

    def test_greedy_with_epsilon_zero(self) -> None:
        agent = make_agent(num_actions=3, epsilon=0.0)
        agent.seed_experience([Experience([0.0], 1, 1.0, None, True)])
        for _ in range(100):
            assert agent.first_action([0.0]) == 1
            agent.end_episode()

    def test_uniform_with_epsilon_one(self) -> None:
        agent = make_agent(num_actions=3, epsilon=1.0, seed=123)
        agent.seed_experience([Experience([0.0], 0, 100.0, None, True)])
        counts = np.zeros(3, dtype=int)
        for _ in range(600):
            counts[agent.first_action([0.0])] += 1
            agent.end_episode()
        assert counts.sum() == 600
        assert np.all(counts > 120)

    def test_ties_broken_randomly(self) -> None:
        agent = make_agent(num_actions=2, epsilon=0.0, seed=5)
        seen = set()
        for _ in range(200):
            seen.add(agent.first_action([0.0, 0.0]))
            agent.end_episode()
        assert seen == {0, 1}

    def test_ties_only_among_maximal_actions(self) -> None:
        agent = make_agent(num_actions=4, epsilon=0.0, initial_value=0.0, seed=9)
        agent.seed_experience([
            Experience([0.0], 1, 1.0, None, True),
            Experience([0.0], 3, 1.0, None, True),
        ])
        seen = set()
        for _ in range(200):
            seen.add(agent.first_action([0.0]))
            agent.end_episode()
        assert seen == {1, 3}

    def test_actions_in_range(self) -> None:
        agent = make_agent(num_actions=5, epsilon=0.5, seed=2)
        for i in range(100):
            action = agent.first_action([float(i % 7)])
            assert 0 <= action < 5
            agent.end_episode()


class TestDeterminism:
    """Tests for seeded replay."""

    def run_sequence(self, seed: int):
        agent = make_agent(num_actions=3, epsilon=0.3, seed=seed)
        actions = [agent.first_action([0.0, 0.0])]
        for t in range(1, 60):
            actions.append(agent.next_action(float(t % 3) - 1.0, [float(t % 4), float(t % 5)]))
        agent.last_action(1.0)
        return actions, table_snapshot(agent)

    def test_same_seed_same_behaviour(self) -> None:
        actions_a, table_a = self.run_sequence(seed=42)
        actions_b, table_b = self.run_sequence(seed=42)
        assert actions_a == actions_b
        assert table_a == table_b

    def test_same_seed_same_training_run(self) -> None:
        snapshots = []
        for _ in range(2):
            env = GridWorld(GridWorldConfig(size=3, goal=(2, 2)))
            agent = make_agent(num_actions=4, epsilon=0.2, seed=8)
            metrics = train(agent, env, TrainingConfig(episodes=30, max_steps=50, log_interval=0))
            snapshots.append((metrics.episode_lengths, table_snapshot(agent)))
        assert snapshots[0] == snapshots[1]


class TestEpisodeStateMachine:
    """Tests for the first/next/last action contract."""

    def test_next_action_without_episode(self) -> None:
        agent = make_agent()
        with pytest.raises(UsageError):
            agent.next_action(1.0, [0.0, 0.0])

    def test_last_action_without_episode(self) -> None:
        agent = make_agent()
        with pytest.raises(UsageError):
            agent.last_action(1.0)

    def test_last_action_twice(self) -> None:
        agent = make_agent()
        agent.first_action([0.0, 0.0])
        agent.last_action(1.0)
        with pytest.raises(UsageError):
            agent.last_action(1.0)

    def test_first_action_during_episode_is_strict_by_default(self) -> None:
        agent = make_agent()
        agent.first_action([0.0, 0.0])
        with pytest.raises(UsageError):
            agent.first_action([1.0, 1.0])
        assert agent.in_episode

    def test_first_action_restarts_when_lenient(self) -> None:
        agent = QLearner(QLearnerConfig(num_actions=2, epsilon=0.0, seed=0, strict_episodes=False))
        agent.first_action([0.0, 0.0])
        agent.first_action([1.0, 1.0])
        assert agent.in_episode
        # the abandoned pair was never updated
        np.testing.assert_array_equal(agent.get_q_values([0.0, 0.0]), [0.0, 0.0])

    def test_end_episode_discards_pending_pair(self) -> None:
        agent = make_agent(initial_value=1.0)
        agent.first_action([0.0, 0.0])
        agent.end_episode()
        assert not agent.in_episode
        np.testing.assert_array_equal(agent.get_q_values([0.0, 0.0]), [1.0, 1.0])
        with pytest.raises(UsageError):
            agent.last_action(0.0)

    def test_dimension_mismatch(self) -> None:
        agent = make_agent()
        agent.first_action([0.0, 0.0])
        with pytest.raises(DimensionMismatchError):
            agent.next_action(0.0, [0.0, 0.0, 0.0])

    def test_stats(self) -> None:
        agent = make_agent()
        agent.first_action([0.0, 0.0])
        agent.next_action(0.0, [1.0, 0.0])
        agent.last_action(0.0)
        stats = agent.get_stats()
        assert stats["num_states"] == 2
        assert stats["total_steps"] == 2
        assert stats["total_updates"] == 2
        assert stats["in_episode"] is False


class TestSeedExperience:
    """Tests for offline warm-starting."""

    def test_matches_interactive_updates(self) -> None:
        interactive = make_agent(num_actions=2, epsilon=0.0, seed=3)
        a0 = interactive.first_action([0.0])
        a1 = interactive.next_action(1.0, [1.0])
        interactive.last_action(5.0)

        offline = make_agent(num_actions=2, epsilon=0.0, seed=3)
        offline.seed_experience([
            Experience([0.0], a0, 1.0, [1.0], False),
            Experience([1.0], a1, 5.0, None, True),
        ])
        assert table_snapshot(offline) == table_snapshot(interactive)

    def test_replayed_in_order(self) -> None:
        agent = make_agent(num_actions=1, alpha=1.0, gamma=1.0)
        agent.seed_experience([
            Experience([1.0], 0, 3.0, None, True),
            Experience([0.0], 0, 0.0, [1.0], False),
        ])
        assert agent.get_value([0.0]) == 3.0

    def test_does_not_touch_rng_or_episode(self) -> None:
        agent = make_agent(epsilon=0.5)
        before = agent.rng.bit_generator.state
        agent.seed_experience([Experience([0.0, 0.0], 1, 1.0, [0.0, 1.0], False)])
        assert agent.rng.bit_generator.state == before
        assert not agent.in_episode

    def test_accepts_plain_tuples(self) -> None:
        agent = make_agent(alpha=1.0)
        agent.seed_experience([((0.0, 0.0), 0, 2.0, (0.0, 0.0), True)])
        assert agent.get_value([0.0, 0.0]) == 2.0

    def test_invalid_action(self) -> None:
        agent = make_agent(num_actions=2)
        with pytest.raises(UsageError):
            agent.seed_experience([Experience([0.0], 2, 1.0, None, True)])


class TestQueries:
    """Tests for read-only queries."""

    def test_get_value_unseen_does_not_insert(self) -> None:
        agent = make_agent(initial_value=-3.0)
        assert agent.get_value([5.0, 5.0]) == -3.0
        assert agent.num_states == 0

    def test_get_value_is_row_max(self) -> None:
        agent = make_agent(num_actions=3, alpha=1.0)
        agent.seed_experience([
            Experience([0.0], 0, -1.0, None, True),
            Experience([0.0], 2, 4.0, None, True),
        ])
        assert agent.get_value([0.0]) == 4.0

    def test_greedy_action(self) -> None:
        agent = make_agent(num_actions=3, alpha=1.0)
        assert agent.greedy_action([0.0]) is None
        agent.seed_experience([Experience([0.0], 2, 4.0, None, True)])
        assert agent.greedy_action([0.0]) == 2

    def test_get_q_values_returns_copy(self) -> None:
        agent = make_agent()
        agent.first_action([0.0, 0.0])
        values = agent.get_q_values([0.0, 0.0])
        values[0] = 100.0
        assert agent.get_value([0.0, 0.0]) == 0.0


class TestCopySemantics:
    """Tests for copy prohibition and clone()."""

    def test_copy_forbidden(self) -> None:
        agent = make_agent()
        with pytest.raises(TypeError):
            copy.copy(agent)
        with pytest.raises(TypeError):
            copy.deepcopy(agent)

    def test_clone_is_independent(self) -> None:
        agent = make_agent(alpha=1.0)
        agent.seed_experience([Experience([0.0, 0.0], 0, 1.0, None, True)])
        twin = agent.clone()
        assert table_snapshot(twin) == table_snapshot(agent)

        twin.seed_experience([Experience([0.0, 0.0], 0, 9.0, None, True)])
        assert agent.get_value([0.0, 0.0]) == 1.0
        assert twin.get_value([0.0, 0.0]) == 9.0

    def test_clone_continues_random_stream(self) -> None:
        agent = make_agent(num_actions=4, epsilon=1.0, seed=11)
        agent.first_action([0.0, 0.0])
        agent.end_episode()
        twin = agent.clone()
        for i in range(20):
            s = [float(i), 0.0]
            assert agent.first_action(s) == twin.first_action(s)
            agent.end_episode()
            twin.end_episode()

    def test_clone_with_seed_and_pending_episode(self) -> None:
        agent = make_agent()
        agent.first_action([0.0, 0.0])
        twin = agent.clone(seed=99)
        assert not twin.in_episode
        assert agent.in_episode
        assert twin.config.seed == 99
