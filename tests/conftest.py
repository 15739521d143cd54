import pytest

from velaw import (
    BrooksCoreyParamsBuilder,
    TwoPhaseFluidState,
    VerticalEquilibriumParamsBuilder,
)


@pytest.fixture
def brooks_corey_params():
    return BrooksCoreyParamsBuilder(
        entry_pressure=1e4, pore_size_distribution_index=2.0
    ).finalize()


@pytest.fixture
def ve_builder():
    return (
        VerticalEquilibriumParamsBuilder.with_coefficients(1e4, 2.0)
        .set_residual_wetting_saturation(0.1)
        .set_residual_non_wetting_saturation(0.05)
        .set_column_height(10.0)
    )


@pytest.fixture
def ve_params(ve_builder):
    return ve_builder.finalize()


@pytest.fixture
def no_residual_ve_params():
    return (
        VerticalEquilibriumParamsBuilder.with_coefficients(1e4, 2.0)
        .set_column_height(10.0)
        .finalize()
    )


@pytest.fixture
def fluid_state():
    return TwoPhaseFluidState.from_non_wetting_saturation(
        0.5,
        max_saturation=0.6,
        densities=(1000.0, 700.0),
        viscosities=(1e-3, 5e-5),
        pressures=(1e5, 1.2e5),
    )
