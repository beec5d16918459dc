"""Expansion calculator: tabulated expansion history at requested stretch values.

Combines the stretch grid, the integrator and the density model into one
ExpansionRecord per stretch value. Units: time in Gyr, distance in Gly,
velocity in units of c, Hubble rate in km/s/Mpc.

With I_TH(s) the integral of TH over [0, s] and I_THs(s) the integral of THs
over [1, s], for a Hubble constant H0 in Gyr^-1:

    t(s)      = (I_THs(inf) - I_THs(s)) / H0        age at s
    d_now(s)  = |I_TH(s) - I_TH(1)| / H0            proper distance now
    d_then(s) = d_now / s                           proper distance at s
    d_par(s)  = (I_TH(inf) - I_TH(s)) / (s H0)      particle horizon at s
    d_hubble  = 1 / H(s)                            Hubble radius
    v_now     = d_now H0,  v_then = d_then H(s),  v_gen = a H(s) / H0

At s = 1 exactly, d_now, d_then, v_now and v_then are 0 and v_gen is 1 by
definition; they are set rather than left to floating point cancellation.
At s = inf (the origin of time) the limits are used: t = d_then = 0 and
v_then = v_gen = inf.

Key functions:
    calculate_expansion(params, request, prec) -> list[ExpansionRecord]
    calculate_age(params, prec)                -> float
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass

from jaxexpansion.density import (
    density_coefficients,
    variables_at_infinity,
    variables_at_stretch,
)
from jaxexpansion.errors import NonFiniteDensityError
from jaxexpansion.integrate import IntegrationOutput, IntegrationResult, integrate_kernels
from jaxexpansion.params import ModelParams, PrecisionParams
from jaxexpansion.stretch import as_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpansionRecord:
    """Expansion history at one stretch value."""

    s: float                 # stretch 1/a
    a: float                 # scale factor
    z: float                 # redshift
    t: float                 # age of the universe [Gyr]
    d_now: float             # proper distance now [Gly]
    d_then: float            # proper distance at s [Gly]
    d_par: float             # particle horizon at s [Gly]
    d_hubble: float          # Hubble radius at s [Gly]
    v_now: float             # recession velocity now [c]
    v_then: float            # recession velocity at s [c]
    v_gen: float             # generalized recession rate a H / H0
    H: float                 # Hubble rate [km/s/Mpc]
    Omega_m: float
    Omega_lambda: float
    Omega_r: float
    Omega_total: float
    temperature: float       # CMB temperature [K]
    rho_crit: float          # critical density [kg/m^3]

    def as_dict(self) -> dict:
        return asdict(self)


def _make_record(
    result: IntegrationResult,
    output: IntegrationOutput,
    params: ModelParams,
) -> ExpansionRecord:
    s = result.s
    H0 = params.H0_Gyr
    at_origin = math.isinf(s)
    v = variables_at_infinity(params) if at_origin else variables_at_stretch(s, params)
    H = float(v.H)
    H_Gyr = H * params.kmsmpsc_to_gyr
    a = 1.0 / s

    if s == 1.0:
        d_now = d_then = v_now = v_then = 0.0
        v_gen = 1.0
    elif at_origin:
        # a -> 0 while a H -> inf: everything is at zero distance, receding
        # infinitely fast.
        d_now = (result.th - output.th_at_one) / H0
        d_then = 0.0
        v_now = d_now * H0
        v_then = v_gen = math.inf
    else:
        d_now = abs(result.th - output.th_at_one) / H0
        d_then = d_now / s
        v_now = d_now * H0
        v_then = d_then * H_Gyr
        v_gen = a * H / params.H0

    return ExpansionRecord(
        s=s,
        a=a,
        z=s - 1.0,
        t=(output.ths_at_infinity - result.ths) / H0,
        d_now=d_now,
        d_then=d_then,
        d_par=(output.th_at_infinity - result.th) / s / H0,
        d_hubble=1.0 / H_Gyr,
        v_now=v_now,
        v_then=v_then,
        v_gen=v_gen,
        H=H,
        Omega_m=float(v.Omega_m),
        Omega_lambda=float(v.Omega_lambda),
        Omega_r=float(v.Omega_r),
        Omega_total=float(v.Omega_total),
        temperature=float(v.temperature),
        rho_crit=float(v.rho_crit),
    )


def calculate_expansion(
    params: ModelParams,
    request,
    prec: PrecisionParams = PrecisionParams(),
) -> list:
    """Calculate the expansion history at the requested stretch values.

    Args:
        params: model parameters
        request: a StretchRequest, or a sequence of stretch values in
            descending order (used verbatim)
        prec: integrator settings

    Returns:
        List of ExpansionRecord in the order of the requested stretch values.

    Raises:
        InvalidStretchError: the request is invalid (raised before integrating).
        NonFiniteDensityError: E^2 was not finite inside the requested range.
    """
    stretch = as_request(request).resolve()
    logger.debug("Calculating expansion at %d stretch values from %g to %g",
                 len(stretch), stretch[0], stretch[-1])

    output = integrate_kernels(stretch, density_coefficients(params), prec)
    if output.is_truncated:
        raise NonFiniteDensityError(
            output.truncated_at,
            f"Density is not finite past stretch s = {output.truncated_at!r}; "
            f"check the model parameters ({params})",
        )

    records = [_make_record(result, output, params) for result in reversed(output.results)]
    logger.debug("Integrated in %d steps", output.n_steps)
    return records


def calculate_age(params: ModelParams, prec: PrecisionParams = PrecisionParams()) -> float:
    """Age of the universe now, in Gyr.

    Only the integral from s = 1 to infinity matters, so a single point is
    requested.
    """
    (now,) = calculate_expansion(params, [1.0], prec)
    return now.t
