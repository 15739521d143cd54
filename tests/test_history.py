import numpy as np
import pytest

from velaw import SaturationHistory, ValidationError, update_max_saturation


@pytest.mark.parametrize(
    "saturation, max_saturation, tolerance, expected",
    [
        (0.3, 0.5, 0.0, 0.5),
        (0.7, 0.5, 0.0, 0.7),
        (0.52, 0.5, 0.05, 0.5),
        (0.6, 0.5, 0.05, 0.6),
    ],
)
def test_update_max_saturation(saturation, max_saturation, tolerance, expected):
    updated = update_max_saturation(saturation, max_saturation, tolerance)
    assert isinstance(updated, float)
    assert updated == pytest.approx(expected)


def test_update_max_saturation_with_arrays():
    updated = update_max_saturation(np.array([0.1, 0.6, 0.4]), 0.4)
    np.testing.assert_allclose(updated, [0.4, 0.6, 0.4])


def test_history_from_initial_saturation():
    history = SaturationHistory.from_initial_saturation([0.1, 0.2, 0.3])

    np.testing.assert_allclose(history.max_saturation_grid, [0.1, 0.2, 0.3])
    assert history.imbibition_flag_grid.dtype == bool
    assert not history.imbibition_flag_grid.any()


def test_history_tracks_drainage_and_imbibition():
    history = SaturationHistory.from_initial_saturation([0.1, 0.2, 0.3])
    updated = history.update([0.2, 0.1, 0.3])

    np.testing.assert_allclose(updated.max_saturation_grid, [0.2, 0.2, 0.3])
    np.testing.assert_array_equal(updated.imbibition_flag_grid, [False, True, False])
    # previous history is untouched
    np.testing.assert_allclose(history.max_saturation_grid, [0.1, 0.2, 0.3])


def test_history_maximum_never_decreases():
    rng = np.random.default_rng(42)
    history = SaturationHistory.from_initial_saturation(np.zeros((4, 5)))
    for _ in range(10):
        previous = history.max_saturation_grid
        saturation = rng.uniform(0.0, 1.0, size=(4, 5))
        history = history.update(saturation)
        assert history.max_saturation_grid.shape == (4, 5)
        assert np.all(history.max_saturation_grid >= previous)
        assert np.all(history.max_saturation_grid >= saturation)


def test_history_update_with_tolerance():
    history = SaturationHistory.from_initial_saturation([0.5, 0.5])
    updated = history.update([0.52, 0.48], tolerance=0.05)

    np.testing.assert_allclose(updated.max_saturation_grid, [0.5, 0.5])
    np.testing.assert_array_equal(updated.imbibition_flag_grid, [False, False])


def test_history_rejects_invalid_updates():
    history = SaturationHistory.from_initial_saturation([0.1, 0.2])
    with pytest.raises(ValidationError):
        history.update([0.1, 0.2, 0.3])
    with pytest.raises(ValidationError):
        history.update([0.1, 0.2], tolerance=-1.0)


def test_history_grids_must_match():
    with pytest.raises(ValidationError):
        SaturationHistory(
            max_saturation_grid=np.zeros(3), imbibition_flag_grid=np.zeros(2, dtype=bool)
        )
