"""Density model: the dimensionless Friedmann equation as a function of stretch.

    E^2(s) = H(s)^2 / H0^2 = Omega_lambda + Omega_k s^2 + Omega_m s^3 + Omega_r s^4

with s = 1/a = 1 + z. E^2 is valid on [0, inf): E^2(0) = Omega_lambda is the
far-future asymptote, and at very large s the polynomial overflows to inf.
Nothing here raises on overflow; a non-finite E^2 means "no information" and
it is up to the caller to decide whether that is an error.

Fractional densities Omega_x(s) = Omega_x s^k / E^2(s) are evaluated in plain
double precision. Where one term dominates E^2 by many orders of magnitude
(deep past, or far future with Omega_lambda ~ 0) the subdominant fractions
lose accuracy; expect a relative precision floor of ~1e-10.

Key functions:
    density_coefficients(params) -> [Omega_lambda, Omega_k, Omega_m, Omega_r]
    e_squared(s, coeffs)         -> E^2(s)
    kernels(s, coeffs)           -> (TH, THs)
    variables_at_stretch(s, params) -> DensitySnapshot
    variables_at_infinity(params)   -> DensitySnapshot
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jaxtyping import Array, Float

from jaxexpansion.params import ModelParams


class DensitySnapshot(NamedTuple):
    """Background quantities at one stretch value."""

    H: Float[Array, "..."]              # Hubble rate [km/s/Mpc]
    Omega_m: Float[Array, "..."]
    Omega_lambda: Float[Array, "..."]
    Omega_r: Float[Array, "..."]
    Omega_k: Float[Array, "..."]
    Omega_total: Float[Array, "..."]    # matter + dark energy + radiation
    temperature: Float[Array, "..."]    # CMB temperature [K]
    rho_crit: Float[Array, "..."]       # critical density [kg/m^3]


def density_coefficients(params: ModelParams) -> Float[Array, "4"]:
    """Coefficients of E^2 for the powers s^0, s^2, s^3, s^4."""
    return jnp.array(
        [params.Omega_lambda, params.Omega_k, params.Omega_m, params.Omega_r],
        dtype=jnp.float64,
    )


def e_squared(s: Float[Array, "..."], coeffs: Float[Array, "4"]) -> Float[Array, "..."]:
    """Squared dimensionless Hubble rate E^2(s).

    Uses products rather than powers so that large s overflows to inf. Terms
    with a zero coefficient are dropped rather than evaluated as 0 * inf.
    """
    s2 = s * s
    terms = (coeffs[1] * s2, coeffs[2] * s2 * s, coeffs[3] * s2 * s2)
    e2 = coeffs[0]
    for coeff, term in zip((coeffs[1], coeffs[2], coeffs[3]), terms):
        e2 = e2 + jnp.where(coeff == 0.0, 0.0, term)
    return e2


def kernels(
    s: Float[Array, "..."], coeffs: Float[Array, "4"]
) -> tuple[Float[Array, "..."], Float[Array, "..."]]:
    """Integration kernels at stretch s.

    TH = 1/E(s) integrates to H0 times the comoving distance, THs = TH/s
    integrates to H0 times cosmic time. THs is singular at s = 0.
    """
    th = 1.0 / jnp.sqrt(e_squared(s, coeffs))
    return th, th / s


def variables_at_stretch(s: Float[Array, "..."], params: ModelParams) -> DensitySnapshot:
    """Hubble rate, density fractions, temperature and critical density at s.

    Works elementwise on arrays of s.
    """
    s = jnp.asarray(s, dtype=jnp.float64)
    coeffs = density_coefficients(params)
    e2 = e_squared(s, coeffs)
    s2 = s * s

    H = params.H0 * jnp.sqrt(e2)
    Omega_m = params.Omega_m * s2 * s / e2
    Omega_lambda = params.Omega_lambda / e2
    Omega_r = params.Omega_r * s2 * s2 / e2
    Omega_k = params.Omega_k * s2 / e2

    H_seconds = H * params.kmsmpsc_to_gyr / params.gyr_to_seconds
    rho_crit = params.rho_const * H_seconds * H_seconds

    return DensitySnapshot(
        H=H,
        Omega_m=Omega_m,
        Omega_lambda=Omega_lambda,
        Omega_r=Omega_r,
        Omega_k=Omega_k,
        Omega_total=Omega_m + Omega_lambda + Omega_r,
        temperature=params.T_cmb * s,
        rho_crit=rho_crit,
    )


def variables_at_infinity(params: ModelParams) -> DensitySnapshot:
    """Limit of `variables_at_stretch` for s -> inf (the origin of time).

    The highest power of s with a nonzero coefficient dominates E^2, so its
    fraction goes to one and all others to zero.
    """
    fractions = dict.fromkeys(("Omega_r", "Omega_m", "Omega_k", "Omega_lambda"), 0.0)
    for name in fractions:
        if getattr(params, name) != 0.0:
            fractions[name] = 1.0
            break

    def scalar(x):
        return jnp.asarray(x, dtype=jnp.float64)

    return DensitySnapshot(
        H=scalar(jnp.inf),
        Omega_m=scalar(fractions["Omega_m"]),
        Omega_lambda=scalar(fractions["Omega_lambda"]),
        Omega_r=scalar(fractions["Omega_r"]),
        Omega_k=scalar(fractions["Omega_k"]),
        Omega_total=scalar(
            fractions["Omega_m"] + fractions["Omega_lambda"] + fractions["Omega_r"]
        ),
        temperature=scalar(jnp.inf),
        rho_crit=scalar(jnp.inf),
    )
