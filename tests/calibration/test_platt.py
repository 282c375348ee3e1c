"""Tests for Platt scaling."""

from __future__ import annotations

import math

import numpy as np
import pytest

from binforecast.calibration.platt import (
    CalibrationResult,
    InsufficientDataError,
    PlattConfig,
    PlattScaling,
    calibrate,
    calibrate_probabilities,
    fit_platt_scaling,
    logit,
    sigmoid,
)


def make_scaling(a: float, b: float) -> PlattScaling:
    return PlattScaling(a=a, b=b, metadata=PlattScaling.identity().metadata)


def make_calibrated_data(n: int = 1000, seed: int = 0) -> tuple[list[float], list[bool]]:
    """Probabilities whose outcomes are drawn at exactly that rate."""
    rng = np.random.default_rng(seed)
    probs = rng.uniform(0.05, 0.95, size=n).tolist()
    outcomes = [bool(rng.random() < p) for p in probs]
    return probs, outcomes


class TestTransform:
    """Tests for applying a fitted scaling."""

    def test_identity(self) -> None:
        """a=1, b=0 returns the input up to rounding."""
        scaling = PlattScaling.identity()
        for p in [0.01, 0.1, 0.3, 0.5, 0.7, 0.9, 0.99]:
            assert scaling.transform(p) == pytest.approx(p, abs=1e-12)

    def test_stays_in_bounds(self) -> None:
        for a, b in [(1.0, 0.0), (2.0, 1.0), (0.5, -1.0), (40.0, -2.0), (-1.0, 2.0)]:
            scaling = make_scaling(a, b)
            for p in [0.0, 1e-20, 0.001, 0.5, 0.999, 1.0]:
                assert 0.0 <= scaling.transform(p) <= 1.0

    def test_monotonic_for_positive_slope(self) -> None:
        scaling = make_scaling(2.0, 0.5)
        probs = [i / 20 for i in range(1, 20)]
        results = scaling.transform_batch(probs)
        for lo, hi in zip(results, results[1:], strict=False):
            assert lo < hi

    def test_negative_slope_inverts_order(self) -> None:
        scaling = make_scaling(-1.0, 0.0)
        assert scaling.transform(0.2) > scaling.transform(0.8)

    def test_calibrate_probabilities_matches_batch(self) -> None:
        scaling = make_scaling(1.5, -0.2)
        probs = [0.1, 0.4, 0.6, 0.95]
        assert calibrate_probabilities(probs, scaling) == [scaling.transform(p) for p in probs]


class TestMath:
    def test_logit_inverts_sigmoid(self) -> None:
        for z in [-5.0, -0.3, 0.0, 2.0, 7.5]:
            assert logit(sigmoid(z)) == pytest.approx(z, abs=1e-9)

    def test_logit_clamps_endpoints(self) -> None:
        assert math.isfinite(logit(0.0))
        assert math.isfinite(logit(1.0))
        assert logit(0.0) < -30
        assert logit(1.0) > 30

    def test_sigmoid_clamps_input(self) -> None:
        assert sigmoid(1e6) == sigmoid(500.0)
        assert sigmoid(-1e6) == sigmoid(-500.0)


class TestPlattConfig:
    def test_defaults(self) -> None:
        config = PlattConfig()
        assert config.learning_rate == 0.01
        assert config.max_iterations == 1000
        assert config.convergence_threshold == 1e-6
        assert config.seed is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"learning_rate": 0}, {"max_iterations": 0}, {"convergence_threshold": -1}, {"seed": -3}],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            PlattConfig(**kwargs)


class TestFitPreconditions:
    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="same length"):
            fit_platt_scaling([0.5] * 12, [True] * 11)

    def test_nine_samples_rejected(self) -> None:
        probs, outcomes = make_calibrated_data(9)
        with pytest.raises(InsufficientDataError) as exc_info:
            fit_platt_scaling(probs, outcomes)
        assert exc_info.value.n_samples == 9
        assert isinstance(exc_info.value, ValueError)

    def test_ten_samples_accepted(self) -> None:
        probs, outcomes = make_calibrated_data(10)
        scaling = fit_platt_scaling(probs, outcomes, config=PlattConfig(seed=1))
        assert scaling.metadata.holdout_samples == 5

    @pytest.mark.parametrize("ratio", [-0.1, 1.0, 1.5])
    def test_bad_holdout_ratio(self, ratio: float) -> None:
        probs, outcomes = make_calibrated_data(20)
        with pytest.raises(ValueError):
            fit_platt_scaling(probs, outcomes, ratio)


class TestHoldout:
    """Tests for the train/holdout split."""

    def test_twenty_samples_use_minimum_holdout(self) -> None:
        """floor(20 * 0.2) = 4 is raised to the minimum of 5."""
        probs, outcomes = make_calibrated_data(20)
        scaling = fit_platt_scaling(probs, outcomes, 0.2, config=PlattConfig(seed=3))
        assert scaling.metadata.holdout_samples == 5

    def test_ratio_sets_holdout_size(self) -> None:
        probs, outcomes = make_calibrated_data(200)
        scaling = fit_platt_scaling(probs, outcomes, 0.25, config=PlattConfig(seed=3))
        assert scaling.metadata.holdout_samples == 50

    def test_improvement_is_difference_of_briers(self) -> None:
        probs, outcomes = make_calibrated_data(300)
        meta = fit_platt_scaling(probs, outcomes, config=PlattConfig(seed=5)).metadata
        assert meta.improvement == pytest.approx(
            meta.original_brier_score - meta.calibrated_brier_score
        )


class TestFit:
    """Tests for gradient descent on the Brier score."""

    def test_well_calibrated_input_stays_near_identity(self) -> None:
        probs, outcomes = make_calibrated_data(1000)
        scaling = fit_platt_scaling(probs, outcomes, config=PlattConfig(seed=0))
        assert abs(scaling.a - 1.0) < 0.5
        assert abs(scaling.b) < 0.5

    def test_overconfident_input_is_tempered(self) -> None:
        """Predictions of 0.9 that resolve YES half the time move toward 0.5."""
        probs = [0.9] * 200
        outcomes = [i % 2 == 0 for i in range(200)]
        scaling = fit_platt_scaling(
            probs, outcomes, config=PlattConfig(learning_rate=1.0, max_iterations=5000, seed=0)
        )
        assert scaling.transform(0.9) < 0.8

    def test_underconfident_input_is_boosted(self) -> None:
        probs = [0.5] * 200
        outcomes = [i % 10 != 0 for i in range(200)]
        scaling = fit_platt_scaling(
            probs, outcomes, config=PlattConfig(learning_rate=1.0, max_iterations=5000, seed=0)
        )
        assert scaling.transform(0.5) > 0.6

    def test_seed_makes_fit_reproducible(self) -> None:
        probs, outcomes = make_calibrated_data(100)
        a = fit_platt_scaling(probs, outcomes, config=PlattConfig(seed=11))
        b = fit_platt_scaling(probs, outcomes, config=PlattConfig(seed=11))
        assert (a.a, a.b) == (b.a, b.b)
        assert a.metadata.calibrated_brier_score == b.metadata.calibrated_brier_score

    def test_rng_overrides_seed(self) -> None:
        probs, outcomes = make_calibrated_data(100)
        a = fit_platt_scaling(
            probs, outcomes, config=PlattConfig(seed=1), rng=np.random.default_rng(99)
        )
        b = fit_platt_scaling(
            probs, outcomes, config=PlattConfig(seed=2), rng=np.random.default_rng(99)
        )
        assert (a.a, a.b) == (b.a, b.b)

    def test_on_step_receives_parameters(self) -> None:
        probs, outcomes = make_calibrated_data(50)
        steps: list[tuple[int, float, float, float]] = []
        fit_platt_scaling(
            probs,
            outcomes,
            config=PlattConfig(max_iterations=10, convergence_threshold=0.0, seed=0),
            on_step=lambda i, loss, a, b: steps.append((i, loss, a, b)),
        )

        assert [s[0] for s in steps] == list(range(10))
        assert steps[0][2:] == (1.0, 0.0)
        assert all(0.0 <= s[1] <= 1.0 for s in steps)

    def test_regression_is_reported_not_hidden(self, caplog: pytest.LogCaptureFixture) -> None:
        """A fit that worsens the holdout is returned with negative improvement."""
        # Training part says YES is rare, holdout part says YES is certain
        probs = [0.5] * 40
        outcomes = [False] * 40
        rng = np.random.default_rng(0)
        order = rng.permutation(40).tolist()
        for i in order[-8:]:
            outcomes[i] = True

        with caplog.at_level("WARNING", logger="binforecast.calibration.platt"):
            scaling = fit_platt_scaling(
                probs,
                outcomes,
                0.2,
                config=PlattConfig(learning_rate=1.0, max_iterations=2000),
                rng=np.random.default_rng(0),
            )

        assert scaling.metadata.improvement < 0
        assert any("worsened" in r.message for r in caplog.records)


class TestCalibrate:
    def test_returns_result_for_same_inputs(self) -> None:
        probs, outcomes = make_calibrated_data(40)
        result = calibrate(probs, outcomes, config=PlattConfig(seed=4))

        assert isinstance(result, CalibrationResult)
        assert result.original_probabilities == probs
        assert result.calibrated_probabilities == calibrate_probabilities(
            probs, result.platt_scaling
        )
        assert set(result.to_dict()) == {
            "calibrated_probabilities",
            "original_probabilities",
            "a",
            "b",
        }
