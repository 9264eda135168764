"""Tests for the Markov generator-failure model."""

from __future__ import annotations

import numpy as np
import pytest

from der_reliability.engine.markov import (
    generator_output,
    generator_state_space,
    joint_generator_output,
    markov_matrix,
    starting_probabilities,
    transition_prob,
)


# ═══════════════════════════════════════════════════════════════════════════
# Single generator type
# ═══════════════════════════════════════════════════════════════════════════

class TestTransitionProb:

    def test_binomial_values(self):
        result = transition_prob([1, 2, 3, 4], [0, 1, 2, 3], 0.5)
        assert result.tolist() == pytest.approx([0.5, 0.5, 0.375, 0.25])

    def test_more_units_than_running_is_impossible(self):
        assert transition_prob([1], [2], 0.3)[0] == 0.0

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            transition_prob([-1], [0], 0.5)


class TestMarkovMatrix:

    def test_two_units(self):
        m = markov_matrix(2, 0.1)
        assert m[0].tolist() == pytest.approx([1.0, 0.0, 0.0])
        assert m[1].tolist() == pytest.approx([0.1, 0.9, 0.0])
        assert m[2].tolist() == pytest.approx([0.01, 0.18, 0.81])

    def test_rows_sum_to_one(self):
        m = markov_matrix(5, 0.07)
        assert m.sum(axis=1) == pytest.approx(np.ones(6))

    def test_zero_failure_rate_is_identity(self):
        m = markov_matrix(3, 0.0)
        assert not np.isnan(m).any()
        np.testing.assert_allclose(m, np.eye(4))

    def test_lower_triangular(self):
        m = markov_matrix(4, 0.3)
        assert np.allclose(np.triu(m, k=1), 0.0)


class TestStartingProbabilities:

    def test_two_units(self):
        start = starting_probabilities(2, 0.99, 0.05)
        assert start.tolist() == pytest.approx([0.00354025, 0.1119195, 0.88454025])

    def test_perfect_units_all_start(self):
        assert starting_probabilities(3, 1.0, 0.0).tolist() == pytest.approx([0, 0, 0, 1.0])

    def test_sums_to_one(self):
        assert starting_probabilities(4, 0.9, 0.2).sum() == pytest.approx(1.0)


def test_generator_output():
    assert generator_output(3, 750).tolist() == [0, 750, 1500, 2250]


# ═══════════════════════════════════════════════════════════════════════════
# Multiple generator types
# ═══════════════════════════════════════════════════════════════════════════

class TestGeneratorStateSpace:

    def test_single_type_matches_scalar_model(self):
        output, transition, start = generator_state_space(2, 1.0, 0.99, 0.05, 0.1)
        assert output.tolist() == [0.0, 1.0, 2.0]
        np.testing.assert_allclose(transition, markov_matrix(2, 0.1))
        np.testing.assert_allclose(start, starting_probabilities(2, 0.99, 0.05))

    def test_two_types_joint_states(self):
        output, transition, start = generator_state_space([1, 2], [100, 50], 1.0, 0.0, [0.1, 0.2])
        # first type most significant: (0,0) (0,1) (0,2) (1,0) (1,1) (1,2)
        assert output.tolist() == [0, 50, 100, 100, 150, 200]
        assert transition.shape == (6, 6)
        assert transition.sum(axis=1) == pytest.approx(np.ones(6))
        assert start.tolist() == pytest.approx([0, 0, 0, 0, 0, 1.0])

    def test_scalars_broadcast_against_lists(self):
        output, _, _ = generator_state_space([1, 1], 1.0, 1.0, 0.0, 0.2)
        assert output.tolist() == [0, 1, 1, 2]

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(ValueError, match="mismatched"):
            generator_state_space([1, 1], [1, 1, 1], 1.0, 0.0, 0.2)

    def test_fractional_unit_count_rejected(self):
        with pytest.raises(ValueError):
            generator_state_space(1.5, 1.0, 1.0, 0.0, 0.2)


def test_pure_functions_are_repeatable():
    assert np.array_equal(markov_matrix(4, 0.13), markov_matrix(4, 0.13))
    assert np.array_equal(starting_probabilities(4, 0.9, 0.1), starting_probabilities(4, 0.9, 0.1))
    m = markov_matrix(6, 0.4)
    assert ((m >= 0) & (m <= 1)).all()


def test_joint_generator_output():
    assert joint_generator_output([1, 2], [100, 50]).tolist() == [0, 50, 100, 100, 150, 200]
    assert joint_generator_output(2, 1.0).tolist() == generator_output(2, 1.0).tolist()
