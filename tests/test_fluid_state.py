import numpy as np
import pytest

from velaw import FluidState, Phase, PhaseCountError, TwoPhaseFluidState


def test_fluid_state_satisfies_protocol(fluid_state):
    assert isinstance(fluid_state, FluidState)


def test_from_non_wetting_saturation(fluid_state):
    assert fluid_state.saturation(Phase.WETTING) == pytest.approx(0.5)
    assert fluid_state.saturation(Phase.NON_WETTING) == pytest.approx(0.5)
    assert fluid_state.max_saturation() == pytest.approx(0.6)
    assert fluid_state.density(Phase.NON_WETTING) == 700.0
    assert fluid_state.viscosity(Phase.WETTING) == 1e-3
    assert fluid_state.pressure(Phase.NON_WETTING) == 1.2e5


def test_max_saturation_defaults_to_current_saturation():
    state = TwoPhaseFluidState.from_non_wetting_saturation(0.3)
    assert state.max_saturation() == pytest.approx(0.3)


def test_setters_replace_single_phase(fluid_state):
    fluid_state.set_density(Phase.WETTING, 1050.0)
    fluid_state.set_pressure(Phase.WETTING, 2e5)
    fluid_state.set_viscosity(Phase.NON_WETTING, 6e-5)

    assert fluid_state.densities == (1050.0, 700.0)
    assert fluid_state.pressure(Phase.WETTING) == 2e5
    assert fluid_state.viscosity(Phase.NON_WETTING) == 6e-5


def test_update_max_saturation(fluid_state):
    fluid_state.set_saturation(Phase.NON_WETTING, 0.4)
    assert fluid_state.update_max_saturation() == pytest.approx(0.6)

    fluid_state.set_saturation(Phase.NON_WETTING, 0.7)
    assert fluid_state.update_max_saturation() == pytest.approx(0.7)
    assert fluid_state.max_saturation() == pytest.approx(0.7)


def test_array_state():
    saturation = np.array([0.1, 0.4])
    state = TwoPhaseFluidState.from_non_wetting_saturation(
        saturation, max_saturation=[0.3, 0.3]
    )

    np.testing.assert_allclose(state.saturation(Phase.WETTING), [0.9, 0.6])
    np.testing.assert_allclose(state.update_max_saturation(), [0.3, 0.4])


def test_per_phase_values_must_match_phase_count():
    with pytest.raises(PhaseCountError):
        TwoPhaseFluidState(saturations=(0.2, 0.3, 0.5))
    with pytest.raises(PhaseCountError):
        TwoPhaseFluidState(saturations=(0.5, 0.5), densities=(1000.0,))


def test_update_max_saturation_with_tolerance(fluid_state):
    fluid_state.set_saturation(Phase.NON_WETTING, 0.62)
    assert fluid_state.update_max_saturation(tolerance=0.05) == pytest.approx(0.6)
