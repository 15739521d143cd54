import warnings

import numpy as np
import pytest

import velaw.vertical_equilibrium as ve
from velaw import (
    VE_LAW_TRAITS,
    Config,
    Constants,
    NotFinalizedError,
    Phase,
    PhaseCountError,
    TwoPhaseFluidState,
    VerticalEquilibriumBrooksCoreyModel,
    c,
    capillary_pressures,
    compute_hydrostatic_capillary_pressure,
    compute_non_wetting_relative_permeability,
    compute_wetting_relative_permeability,
    interface_heights,
    new_phase_values,
    regularized_saturations,
    relative_permeabilities,
    saturations,
)


def test_interface_heights_of_reference_column(ve_params):
    h, hmax = interface_heights(ve_params, 0.5, 0.6)

    assert h == pytest.approx(10.0 * 0.42 / 0.765)
    assert h == pytest.approx(5.490, abs=1e-3)
    assert hmax == pytest.approx(6.6667, abs=1e-4)


def test_relative_permeabilities_of_reference_column(ve_params, fluid_state):
    values = [0.0, 0.0]
    result = relative_permeabilities(values, ve_params, fluid_state)

    h = 10.0 * 0.42 / 0.765
    hmax = 10.0 * 0.6 / 0.9
    assert result is values
    assert values[Phase.NON_WETTING] == pytest.approx(0.01 * h / 10.0)
    assert values[Phase.NON_WETTING] == pytest.approx(0.00549, abs=1e-5)
    assert values[Phase.WETTING] == pytest.approx(
        (10.0 - hmax) / 10.0 + 1e-3 * 0.01 * (hmax - h) / 10.0
    )


def test_hydrostatic_capillary_pressure():
    assert compute_hydrostatic_capillary_pressure(1000.0, 700.0, 5.0, 9.80665) == (
        pytest.approx(14709.975)
    )


def test_capillary_pressures_are_hydrostatic(no_residual_ve_params):
    state = TwoPhaseFluidState.from_non_wetting_saturation(
        0.5, max_saturation=0.5, densities=(1000.0, 700.0)
    )
    values = [None, None]
    capillary_pressures(values, no_residual_ve_params, state)

    assert values[Phase.WETTING] == 0.0
    assert values[Phase.NON_WETTING] == pytest.approx(14709.975)


def test_capillary_pressure_sign_follows_density_contrast(ve_params):
    light = TwoPhaseFluidState.from_non_wetting_saturation(
        0.5, max_saturation=0.6, densities=(1000.0, 700.0)
    )
    heavy = TwoPhaseFluidState.from_non_wetting_saturation(
        0.5, max_saturation=0.6, densities=(700.0, 1000.0)
    )
    assert capillary_pressures([0.0, 0.0], ve_params, light)[Phase.NON_WETTING] > 0.0
    assert capillary_pressures([0.0, 0.0], ve_params, heavy)[Phase.NON_WETTING] < 0.0


def test_plain_capillary_pressure_is_overwritten(monkeypatch, ve_params, fluid_state):
    calls = []

    def baseline(values, params, state):
        calls.append(params)
        values[Phase.WETTING] = -1.0
        values[Phase.NON_WETTING] = -1.0
        return values

    monkeypatch.setattr(ve, "regularized_capillary_pressures", baseline)
    values = [0.0, 0.0]
    capillary_pressures(values, ve_params, fluid_state)

    assert calls == [ve_params.base]
    assert values[Phase.WETTING] == 0.0
    assert values[Phase.NON_WETTING] == pytest.approx(
        300.0 * 9.80665 * 10.0 * 0.42 / 0.765
    )


@pytest.mark.parametrize("max_saturation", [0.0, 0.1, 0.45, 0.8])
def test_interface_height_at_historical_maximum(ve_params, max_saturation):
    h, hmax = interface_heights(ve_params, max_saturation, max_saturation, clamp=False)
    assert h == pytest.approx(hmax)


def test_heights_stay_in_column_when_clamped(ve_params):
    grid = np.linspace(0.0, 1.0, 21)
    saturation, max_saturation = np.meshgrid(grid, grid, indexing="ij")
    admissible = saturation <= max_saturation

    h, hmax = interface_heights(ve_params, saturation, max_saturation)

    assert h.shape == saturation.shape
    assert np.all(h[admissible] >= 0.0)
    assert np.all(h[admissible] <= hmax[admissible])
    assert np.all(hmax[admissible] <= ve_params.column_height)


def test_unclamped_height_can_leave_column(ve_params):
    h, _ = interface_heights(ve_params, 0.0, 0.6, clamp=False)
    assert h < 0.0

    h, _ = interface_heights(ve_params, 0.0, 0.6)
    assert h == 0.0


def test_clamping_keeps_admissible_states_unchanged(ve_params):
    raw = interface_heights(ve_params, 0.5, 0.6, clamp=False)
    clamped = interface_heights(ve_params, 0.5, 0.6)
    assert clamped == pytest.approx(raw)


def test_relative_permeabilities_of_unswept_column(ve_params):
    state = TwoPhaseFluidState.from_non_wetting_saturation(
        0.0, max_saturation=0.0, viscosities=(1e-3, 5e-5)
    )
    values = relative_permeabilities([0.0, 0.0], ve_params, state)

    assert values[Phase.WETTING] == pytest.approx(1.0)
    assert values[Phase.NON_WETTING] == 0.0


def test_non_wetting_relative_permeability_is_monotone():
    heights = np.linspace(0.0, 10.0, 51)
    krn = compute_non_wetting_relative_permeability(heights, 10.0, 0.3)

    assert krn[0] == 0.0
    assert krn[-1] == pytest.approx(0.3)
    assert np.all(np.diff(krn) >= 0.0)


def test_wetting_relative_permeability_of_fully_swept_column():
    krw = compute_wetting_relative_permeability(4.0, 10.0, 10.0, 2.0, 0.5)
    assert krw == pytest.approx(2.0 * 0.5 * 6.0 / 10.0)


def test_array_fluid_state(ve_params):
    saturation = np.array([0.0, 0.2, 0.5])
    state = TwoPhaseFluidState.from_non_wetting_saturation(
        saturation,
        max_saturation=np.array([0.6, 0.6, 0.6]),
        densities=(1000.0, 700.0),
        viscosities=(1e-3, 5e-5),
    )
    values = new_phase_values(saturation.shape)
    relative_permeabilities(values, ve_params, state)

    h, _ = interface_heights(ve_params, saturation, state.max_saturation())
    np.testing.assert_allclose(values[Phase.NON_WETTING], 0.01 * h / 10.0)
    assert values[Phase.NON_WETTING][0] == 0.0

    pressures = capillary_pressures(new_phase_values(saturation.shape), ve_params, state)
    np.testing.assert_allclose(pressures[Phase.WETTING], 0.0)
    np.testing.assert_allclose(pressures[Phase.NON_WETTING], 300.0 * 9.80665 * h)


@pytest.mark.parametrize(
    "operation", [capillary_pressures, relative_permeabilities, saturations]
)
def test_three_phase_container_is_rejected(operation, ve_params, fluid_state):
    with pytest.raises(PhaseCountError):
        operation([0.0, 0.0, 0.0], ve_params, fluid_state)
    with pytest.raises(PhaseCountError):
        operation(np.zeros(3), ve_params, fluid_state)


def test_unfinalized_params_are_rejected(ve_builder, fluid_state):
    with pytest.raises(NotFinalizedError):
        relative_permeabilities([0.0, 0.0], ve_builder, fluid_state)


def test_finalized_builder_is_accepted(ve_builder, ve_params, fluid_state):
    ve_builder.finalize()
    from_builder = relative_permeabilities([0.0, 0.0], ve_builder, fluid_state)
    from_params = relative_permeabilities([0.0, 0.0], ve_params, fluid_state)
    assert from_builder == pytest.approx(from_params)


def test_saturations_follow_plain_law(ve_params, fluid_state):
    with pytest.warns(UserWarning, match="ignores the column height model"):
        values = saturations([0.0, 0.0], ve_params, fluid_state)

    expected = regularized_saturations([0.0, 0.0], ve_params.base, fluid_state)
    assert values == pytest.approx(expected)
    assert values[Phase.WETTING] == pytest.approx(0.25 * 0.85 + 0.1)
    assert values[Phase.WETTING] + values[Phase.NON_WETTING] == pytest.approx(1.0)


def test_law_traits():
    assert VE_LAW_TRAITS.num_phases == 2
    assert VE_LAW_TRAITS.implements_two_phase_api
    assert VE_LAW_TRAITS.is_saturation_dependent
    assert not VE_LAW_TRAITS.is_temperature_dependent
    assert VerticalEquilibriumBrooksCoreyModel.traits is VE_LAW_TRAITS


class TestVerticalEquilibriumBrooksCoreyModel:
    def test_evaluation(self, ve_params, fluid_state):
        model = VerticalEquilibriumBrooksCoreyModel(params=ve_params)
        result = model(fluid_state=fluid_state)

        expected_krs = relative_permeabilities([0.0, 0.0], ve_params, fluid_state)
        expected_pcs = capillary_pressures([0.0, 0.0], ve_params, fluid_state)
        assert set(result) == {"capillary_pressures", "relative_permeabilities"}
        assert result["relative_permeabilities"]["wetting"] == pytest.approx(expected_krs[0])
        assert result["relative_permeabilities"]["non_wetting"] == pytest.approx(
            expected_krs[1]
        )
        assert result["capillary_pressures"]["wetting"] == 0.0
        assert result["capillary_pressures"]["non_wetting"] == pytest.approx(
            expected_pcs[1]
        )

    def test_accepts_finalized_builder(self, ve_builder):
        params = ve_builder.finalize()
        model = VerticalEquilibriumBrooksCoreyModel(params=ve_builder)
        assert model.params is params

    def test_rejects_unfinalized_builder(self, ve_builder):
        with pytest.raises(NotFinalizedError):
            VerticalEquilibriumBrooksCoreyModel(params=ve_builder)

    def test_interface_heights(self, ve_params, fluid_state):
        model = VerticalEquilibriumBrooksCoreyModel(params=ve_params)
        assert model.get_interface_heights(fluid_state) == pytest.approx(
            interface_heights(ve_params, 0.5, 0.6)
        )

    def test_constants_override(self, no_residual_ve_params):
        constants = Constants()
        constants.GRAVITATIONAL_ACCELERATION = 10.0
        model = VerticalEquilibriumBrooksCoreyModel(
            params=no_residual_ve_params, config=Config(constants=constants)
        )
        state = TwoPhaseFluidState.from_non_wetting_saturation(
            0.5, max_saturation=0.5, densities=(1000.0, 700.0)
        )

        pcs = model.get_capillary_pressures(state)

        assert pcs["non_wetting"] == pytest.approx(15000.0)
        assert c.GRAVITATIONAL_ACCELERATION == 9.80665

    def test_unclamped_config(self, ve_params):
        model = VerticalEquilibriumBrooksCoreyModel(
            params=ve_params, config=Config(clamp_interface_heights=False)
        )
        state = TwoPhaseFluidState.from_non_wetting_saturation(0.0, max_saturation=0.6)
        h, _ = model.get_interface_heights(state)
        assert h < 0.0

    def test_saturation_warning_can_be_disabled(self, ve_params, fluid_state):
        model = VerticalEquilibriumBrooksCoreyModel(
            params=ve_params, config=Config(warn_on_saturation_inversion=False)
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            sats = model.get_saturations(fluid_state)
        assert sats["wetting"] == pytest.approx(0.3125)
        assert sats["non_wetting"] == pytest.approx(0.6875)

    def test_update_max_saturation_uses_history_tolerance(self, ve_params, fluid_state):
        model = VerticalEquilibriumBrooksCoreyModel(
            params=ve_params, config=Config(history_tolerance=0.05)
        )
        fluid_state.set_saturation(Phase.NON_WETTING, 0.62)
        assert model.update_max_saturation(fluid_state) == pytest.approx(0.6)

        fluid_state.set_saturation(Phase.NON_WETTING, 0.7)
        assert model.update_max_saturation(fluid_state) == pytest.approx(0.7)
        assert model.get_interface_heights(fluid_state)[1] == pytest.approx(
            10.0 * 0.7 / 0.9
        )
