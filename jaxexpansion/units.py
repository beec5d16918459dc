"""Output scaling of expansion records.

Records are calculated in Gyr, Gly, units of c and km/s/Mpc. The scalings
below only multiply fields; nothing is recalculated apart from the present
age used by "Normalized".

    "GigaLightyear"  native units
    "Gigaparsec"     distances in Gpc
    "Normalized"     times over the present age, distances over the Hubble
                     radius now, H over H0, temperature over T_cmb
    "Zeit"           times and distances over the Hubble time in the infinite
                     future Yinf = (1/H0) / sqrt(Omega_lambda), H in units of 1/Yinf
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from jaxexpansion import constants as const
from jaxexpansion.expansion import calculate_age
from jaxexpansion.params import ModelParams, PrecisionParams

SCALINGS = ("GigaLightyear", "Gigaparsec", "Normalized", "Zeit")

_DISTANCES = ("d_now", "d_then", "d_par", "d_hubble")


def _scale(record, factors: dict):
    return replace(record, **{name: getattr(record, name) * f for name, f in factors.items()})


def scaling_factors(
    scaling: str,
    params: ModelParams,
    age: Optional[float] = None,
    prec: PrecisionParams = PrecisionParams(),
) -> dict:
    """Multiplicative factor per ExpansionRecord field for a named scaling."""
    if scaling == "GigaLightyear":
        return {}
    if scaling == "Gigaparsec":
        return {name: 1.0 / const.gly_per_gpc for name in _DISTANCES}
    if scaling == "Normalized":
        if age is None:
            age = calculate_age(params, prec)
        factors = {name: 1.0 / params.hubble_time for name in _DISTANCES}
        factors.update(t=1.0 / age, H=1.0 / params.H0, temperature=1.0 / params.T_cmb)
        return factors
    if scaling == "Zeit":
        if params.Omega_lambda <= 0.0:
            raise ValueError("Zeit scaling needs Omega_lambda > 0")
        y_inf = params.hubble_time / math.sqrt(params.Omega_lambda)
        factors = {name: 1.0 / y_inf for name in _DISTANCES}
        factors.update(t=1.0 / y_inf, H=params.kmsmpsc_to_gyr * y_inf)
        return factors
    raise ValueError(f"Unknown output scaling: {scaling!r}; expected one of {SCALINGS}")


def scale_records(
    records,
    params: ModelParams,
    scaling: str,
    age: Optional[float] = None,
    prec: PrecisionParams = PrecisionParams(),
) -> list:
    """Return records rescaled to `scaling` units.

    Args:
        records: ExpansionRecord list from `calculate_expansion`
        params: the model the records were calculated with
        scaling: one of SCALINGS
        age: present age in Gyr for "Normalized" (calculated if not given)
        prec: integrator settings used if the age has to be calculated
    """
    factors = scaling_factors(scaling, params, age, prec)
    if not factors:
        return list(records)
    return [_scale(record, factors) for record in records]
