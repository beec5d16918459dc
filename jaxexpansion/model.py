"""Model facade: one object bundling parameters, precision and calculations.

Usage:
    model = create_model("planck2018")
    model.e_squared_at_stretch(2.0)
    model.variables_at_stretch(2.0).Omega_m
    model.calculate_expansion(StretchRequest((1091, 0.01), steps=10, spacing="exponential"))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from jaxexpansion.density import (
    DensitySnapshot,
    density_coefficients,
    e_squared,
    variables_at_stretch,
)
from jaxexpansion.expansion import calculate_age, calculate_expansion
from jaxexpansion.params import ModelParams, PrecisionParams
from jaxexpansion.surveys import DEFAULT_SURVEY


@dataclass(frozen=True)
class ExpansionModel:
    """A Lambda-CDM model ready to evaluate."""

    params: ModelParams = field(default_factory=ModelParams)
    prec: PrecisionParams = field(default_factory=PrecisionParams)

    def e_squared_at_stretch(self, s):
        """E^2(s) = (H(s) / H0)^2."""
        return e_squared(s, density_coefficients(self.params))

    def variables_at_stretch(self, s) -> DensitySnapshot:
        return variables_at_stretch(s, self.params)

    def calculate_expansion(self, request) -> list:
        """See `jaxexpansion.expansion.calculate_expansion`."""
        return calculate_expansion(self.params, request, self.prec)

    def calculate_age(self) -> float:
        """Age of the universe now, in Gyr."""
        return calculate_age(self.params, self.prec)


def create_model(
    config: Union[ModelParams, str, None] = None,
    prec: Optional[PrecisionParams] = None,
    **overrides,
) -> ExpansionModel:
    """Create an ExpansionModel.

    Args:
        config: ModelParams, the name of a survey preset, or None for the
            default survey (Planck 2018)
        prec: integrator settings (defaults to PrecisionParams())
        **overrides: ModelParams fields to replace, e.g. H0=70.0

    Returns:
        ExpansionModel
    """
    if config is None:
        config = DEFAULT_SURVEY
    if isinstance(config, str):
        params = ModelParams.from_survey(config, **overrides)
    elif isinstance(config, ModelParams):
        params = config.replace(**overrides) if overrides else config
    else:
        raise TypeError(
            f"config must be ModelParams, a survey name or None, got {type(config).__name__}"
        )
    return ExpansionModel(params=params, prec=prec if prec is not None else PrecisionParams())
