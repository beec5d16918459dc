"""Reference solutions from an adaptive ODE solver.

Independent of the trapezoidal integrator: the age and distances are
integrated in log(a) with Diffrax Tsit5 (explicit RK4/5) under a PID step
controller, which is how the background is usually solved. These are slower
and only used to cross-check `integrate_kernels`.

    dt/dln(a)   = 1 / H(a)          proper time
    dchi/dln(a) = 1 / (a H(a))      comoving distance (c = 1)

with H in Gyr^-1, so t is in Gyr and chi in Gly.

References:
    Diffrax docs: https://docs.kidger.site/diffrax/
"""

from __future__ import annotations

import math

import diffrax
import jax.numpy as jnp

from jaxexpansion.density import density_coefficients, e_squared
from jaxexpansion.params import ModelParams

A_INI = 1e-12


def _hubble(loga, coeffs, H0):
    """H(a) in Gyr^-1."""
    s = jnp.exp(-loga)
    return H0 * jnp.sqrt(e_squared(s, coeffs))


def _age_rhs(loga, y, args):
    coeffs, H0 = args
    return jnp.array([1.0 / _hubble(loga, coeffs, H0)])


def _distance_rhs(loga, y, args):
    coeffs, H0 = args
    return jnp.array([jnp.exp(-loga) / _hubble(loga, coeffs, H0)])


def _solve_nonstiff(rhs_fn, t0, t1, y0, args, rtol=1e-10, atol=1e-13, max_steps=16384):
    """Final state of a non-stiff ODE solved with Tsit5."""
    sol = diffrax.diffeqsolve(
        diffrax.ODETerm(rhs_fn),
        solver=diffrax.Tsit5(),
        t0=t0,
        t1=t1,
        dt0=None,
        y0=y0,
        saveat=diffrax.SaveAt(t1=True),
        stepsize_controller=diffrax.PIDController(rtol=rtol, atol=atol),
        max_steps=max_steps,
        args=args,
    )
    return sol.ys[-1]


def reference_age(params: ModelParams, s: float = 1.0) -> float:
    """Age of the universe at stretch s, in Gyr.

    Starts at a = A_INI with t = 1 / (2 H), the radiation-dominated solution.
    """
    coeffs = density_coefficients(params)
    H0 = params.H0_Gyr
    loga_ini = math.log(A_INI)
    t_ini = 1.0 / (2.0 * _hubble(loga_ini, coeffs, H0))

    y = _solve_nonstiff(
        _age_rhs, loga_ini, -math.log(s), jnp.array([t_ini]), (coeffs, H0),
    )
    return float(y[0])


def reference_distance(params: ModelParams, s: float) -> float:
    """Proper distance now to stretch s (past or future), in Gly."""
    if s == 1.0:
        return 0.0
    coeffs = density_coefficients(params)
    loga = -math.log(s)
    y = _solve_nonstiff(
        _distance_rhs, min(loga, 0.0), max(loga, 0.0), jnp.array([0.0]),
        (coeffs, params.H0_Gyr),
    )
    return float(y[0])
