"""Adapter for the legacy light-cone calculator inputs.

The legacy parameterization describes the model by Hubble times rather than
density parameters:

    Ynow   Hubble time now [Gyr], Ynow = 978 / H0
    Yinf   Hubble time in the infinite future [Gyr], Yinf = Ynow / sqrt(Omega_lambda)
    s_eq   stretch at matter-radiation equality
    Omega  total density parameter

and the output range by s_upper, s_lower and s_step. A positive s_step is a
number of steps; a negative one is a step size (an amount subtracted for
linear steps, a division factor for exponential steps); zero asks for the
single value s_upper.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from jaxexpansion import constants as const
from jaxexpansion.expansion import calculate_expansion
from jaxexpansion.params import ModelParams, PrecisionParams
from jaxexpansion.stretch import StretchRequest

# Input protection of the legacy calculator
MIN_STRETCH = 0.01
MIN_LINEAR_STEP = 0.01
MIN_EXPONENTIAL_FACTOR = 1.1


@dataclass(frozen=True)
class LegacyInputs:
    Ynow: float
    Yinf: float
    s_eq: float
    Omega: float
    s_lower: float
    s_upper: float
    s_step: float
    exponential: bool = False


def convert_legacy_params(inputs: LegacyInputs) -> ModelParams:
    """ModelParams equivalent to the legacy Ynow / Yinf / s_eq / Omega."""
    Yinf = max(inputs.Ynow, inputs.Yinf)
    return ModelParams(
        H0=const.legacy_hubble_factor / inputs.Ynow,
        Omega_0=inputs.Omega,
        Omega_lambda=(inputs.Ynow / Yinf) ** 2,
        z_eq=inputs.s_eq - 1.0,
    )


def convert_legacy_request(inputs: LegacyInputs) -> StretchRequest:
    """StretchRequest equivalent to the legacy s_upper / s_lower / s_step."""
    upper = max(inputs.s_upper, MIN_STRETCH)
    lower = max(inputs.s_lower, MIN_STRETCH)
    spacing = "exponential" if inputs.exponential else "linear"

    if inputs.s_step == 0 or upper <= lower:
        return StretchRequest((upper,))

    if inputs.s_step > 0:
        steps = max(round(inputs.s_step), 1)
    elif inputs.exponential:
        factor = max(-inputs.s_step, MIN_EXPONENTIAL_FACTOR)
        steps = max(round(math.log(upper / lower) / math.log(factor)), 1)
    else:
        size = max(-inputs.s_step, MIN_LINEAR_STEP)
        steps = max(round((upper - lower) / size), 1)

    if lower < 1.0 < upper:
        steps = max(steps, 2)
    return StretchRequest((upper, lower), steps=int(steps), spacing=spacing)


def convert_legacy_inputs(inputs: LegacyInputs):
    """Return (ModelParams, StretchRequest) for legacy inputs."""
    return convert_legacy_params(inputs), convert_legacy_request(inputs)


def calculate(inputs: LegacyInputs, prec: PrecisionParams = PrecisionParams()) -> list:
    """Expansion records for legacy inputs."""
    params, request = convert_legacy_inputs(inputs)
    return calculate_expansion(params, request, prec)


def calculate_age(inputs: LegacyInputs, prec: PrecisionParams = PrecisionParams()) -> float:
    """Age of the universe now [Gyr] for legacy inputs; the range is ignored."""
    (now,) = calculate_expansion(convert_legacy_params(inputs), [1.0], prec)
    return now.t
