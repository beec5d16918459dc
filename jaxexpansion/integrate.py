"""Stretch integrator for jaxexpansion.

Accumulates the two kernels of the density model,

    TH(s)  = 1 / E(s)          (integral over s gives H0 * distance)
    THs(s) = 1 / (s E(s))      (integral over s gives H0 * time)

from s = 0 (the infinite future) up to s = inf (the origin of time), and
records the running integrals at every requested stretch value. Results are
referenced to now: `th` is the integral of TH over [0, s] and `ths` the
integral of THs over [1, s] (negative below one).

Method: trapezoidal rule with a step that grows by a constant factor on every
iteration and is clipped to land exactly on each requested value. The walk
goes through three phases:

    BELOW_ONE    from 0 to s = 1
    ABOVE_ONE    from 1 to the largest finite requested value
    TO_INFINITY  onwards, with faster step growth (tail_growth, then
                 tail_fast_growth past tail_switch), until E^2 overflows

Overflow of E^2 in the TO_INFINITY phase is the stopping condition: the last
finite sums are the integrals to infinity. A non-finite E^2 before that point,
an E^2 <= 0 anywhere, or an E^2 that stays finite all the way to s = inf (no
origin of time, e.g. de Sitter) truncates the output, which callers must
treat as a bad model.

Two singular points need care:
    - s = 0: the first micro-step [0, h] uses the midpoint rule at h/2, so
      neither kernel is ever evaluated at 0.
    - THs ~ 1/s diverges at 0, so it is only accumulated from the smallest
      requested value (or 1, whichever is lower) upwards, and re-referenced
      to s = 1 at the end.

Each stretch-to-stretch segment runs as one jitted jax.lax.while_loop.

Key function:
    integrate_kernels(stretch_values, coeffs, prec) -> IntegrationOutput
"""

from __future__ import annotations

import enum
import functools
import logging
import math
from typing import NamedTuple, Optional

import jax
import jax.numpy as jnp
from jaxtyping import Array, Float

from jaxexpansion.density import e_squared, kernels
from jaxexpansion.errors import IntegrationError
from jaxexpansion.params import PrecisionParams

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class IntegrationResult(NamedTuple):
    """Running integrals at one requested stretch value."""

    s: float
    th: float          # integral of TH over [0, s]
    ths: float         # integral of THs over [1, s]
    n_steps: int       # steps taken from s = 0 to here
    last_step: float   # size of the step that landed on s


class IntegrationOutput(NamedTuple):
    """All results of one walk from s = 0 to infinity."""

    results: list                  # IntegrationResult, ascending in s
    th_at_one: float               # integral of TH over [0, 1]
    th_at_infinity: float          # integral of TH over [0, inf)
    ths_at_infinity: float         # integral of THs over [1, inf)
    phase: IntegrationPhase        # last phase reached
    n_steps: int
    truncated_at: Optional[float]  # last good s if E^2 failed early, else None

    @property
    def is_truncated(self) -> bool:
        return self.truncated_at is not None


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

class IntegrationPhase(enum.Enum):
    BELOW_ONE = "below_one"
    ABOVE_ONE = "above_one"
    TO_INFINITY = "to_infinity"


def next_phase(phase: IntegrationPhase, s: float, targets_left: bool) -> IntegrationPhase:
    """Phase after landing on stretch s.

    BELOW_ONE ends on reaching s = 1, ABOVE_ONE ends when no finite targets
    are left, TO_INFINITY is final.
    """
    if phase is IntegrationPhase.BELOW_ONE:
        if s < 1.0:
            return phase
        phase = IntegrationPhase.ABOVE_ONE
    if phase is IntegrationPhase.ABOVE_ONE:
        return phase if targets_left else IntegrationPhase.TO_INFINITY
    if phase is IntegrationPhase.TO_INFINITY:
        return phase
    raise ValueError(f"Unknown integration phase: {phase!r}")


# ---------------------------------------------------------------------------
# Jitted segment walk
# ---------------------------------------------------------------------------

class _Carry(NamedTuple):
    s: Float[Array, ""]          # current stretch
    h: Float[Array, ""]          # nominal step (before clipping)
    th: Float[Array, ""]         # integral of TH over [0, s]
    ths: Float[Array, ""]        # integral of THs from the first target to s
    f_th: Float[Array, ""]       # TH(s)
    f_ths: Float[Array, ""]      # THs(s)
    n: Array                     # steps taken
    last_step: Float[Array, ""]
    ok: Array                    # E^2 finite and positive so far
    e2_stop: Float[Array, ""]    # E^2 at the evaluation that set ok=False


def _evaluate(s, coeffs):
    e2 = e_squared(s, coeffs)
    ok = jnp.isfinite(e2) & (e2 > 0.0)
    f_th, f_ths = kernels(s, coeffs)
    return ok, e2, f_th, f_ths


def _initial_step(coeffs, h0: float, first_target: float, growth: float) -> _Carry:
    """First micro-step [0, h] with the rectangle rule at the midpoint h/2.

    Avoids evaluating the kernels at s = 0, where THs is 0/0. THs is not
    accumulated here.
    """
    h = min(h0, first_target)
    s = jnp.asarray(h, dtype=jnp.float64)
    ok_mid, e2_mid, f_mid, _ = _evaluate(0.5 * s, coeffs)
    ok, e2, f_th, f_ths = _evaluate(s, coeffs)
    return _Carry(
        s=s,
        h=jnp.asarray(h0 * growth, dtype=jnp.float64),
        th=s * f_mid,
        ths=jnp.asarray(0.0, dtype=jnp.float64),
        f_th=f_th,
        f_ths=f_ths,
        n=jnp.asarray(1, dtype=jnp.int64),
        last_step=s,
        ok=ok_mid & ok,
        e2_stop=jnp.where(ok_mid, e2, e2_mid),
    )


@functools.partial(jax.jit, static_argnames=("accumulate_ths",))
def _advance(carry: _Carry, target, coeffs, growth, fast_growth, switch, max_steps,
             accumulate_ths: bool = True) -> _Carry:
    """Trapezoidal walk from carry.s up to target (which may be inf).

    The step grows by `growth` while s < switch and by `fast_growth` beyond.
    Stops on landing on target, on a non-finite or non-positive E^2 (keeping
    the last good state, with ok=False), or after max_steps in total.
    """

    def cond(c):
        return c.ok & (c.s < target) & (c.n < max_steps)

    def body(c):
        lands = c.h >= target - c.s
        s_new = jnp.where(lands, target, c.s + c.h)
        dh = s_new - c.s
        ok, e2, f_th, f_ths = _evaluate(s_new, coeffs)

        th = c.th + 0.5 * dh * (c.f_th + f_th)
        if accumulate_ths:
            ths = c.ths + 0.5 * dh * (c.f_ths + f_ths)
        else:
            ths = c.ths

        return _Carry(
            s=jnp.where(ok, s_new, c.s),
            h=c.h * jnp.where(c.s < switch, growth, fast_growth),
            th=jnp.where(ok, th, c.th),
            ths=jnp.where(ok, ths, c.ths),
            f_th=jnp.where(ok, f_th, c.f_th),
            f_ths=jnp.where(ok, f_ths, c.f_ths),
            n=jnp.where(ok, c.n + 1, c.n),
            last_step=jnp.where(ok, dh, c.last_step),
            ok=ok,
            e2_stop=e2,
        )

    return jax.lax.while_loop(cond, body, carry)


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def _targets(stretch_values) -> list:
    """Finite stretch values to land on, ascending, always including 1."""
    finite = {float(s) for s in stretch_values if math.isfinite(s)}
    finite.add(1.0)
    return sorted(finite)


def integrate_kernels(
    stretch_values,
    coeffs: Float[Array, "4"],
    prec: PrecisionParams = PrecisionParams(),
) -> IntegrationOutput:
    """Integrate TH and THs from s = 0 to infinity, reporting at each stretch.

    Args:
        stretch_values: positive stretch values, in any order; math.inf asks
            for the values at the origin of time
        coeffs: E^2 coefficients from `density_coefficients`
        prec: integrator settings

    Returns:
        IntegrationOutput with one IntegrationResult per requested value, in
        ascending order of s. If E^2 fails before the last finite value, or
        turns non-positive or never overflows on the way to infinity, the
        output is truncated (results up to the last value reached).

    Raises:
        IntegrationError: more than prec.max_steps steps were needed.
    """
    requested = {float(s) for s in stretch_values}
    targets = _targets(requested)

    # Scale the first step to the smallest target so that THs, which starts
    # there, is resolved even for targets close to 0.
    h0 = prec.initial_step * min(1.0, targets[0])
    carry = _initial_step(coeffs, h0, targets[0], prec.growth)

    phase = IntegrationPhase.BELOW_ONE
    results = []
    th_at_one = ths_at_one = math.nan
    truncated_at = None

    for i, target in enumerate(targets):
        carry = _advance(
            carry, target, coeffs, prec.growth, prec.growth, math.inf,
            prec.max_steps, accumulate_ths=i > 0,
        )
        if not bool(carry.ok):
            truncated_at = float(carry.s)
            logger.debug("E^2 not finite past s = %g (target %g)", truncated_at, target)
            break
        if float(carry.s) < target:
            raise IntegrationError(
                f"Step limit of {prec.max_steps} reached at s = {float(carry.s):g} "
                f"before s = {target:g}"
            )

        th, ths = float(carry.th), float(carry.ths)
        if target == 1.0:
            th_at_one, ths_at_one = th, ths
        if target in requested:
            results.append((target, th, ths, int(carry.n), float(carry.last_step)))

        new_phase = next_phase(phase, target, targets_left=i < len(targets) - 1)
        if new_phase is not phase:
            logger.debug("%s -> %s at s = %g after %d steps",
                         phase.name, new_phase.name, target, int(carry.n))
            phase = new_phase

    if truncated_at is None:
        carry = _advance(
            carry, math.inf, coeffs, prec.tail_growth, prec.tail_fast_growth,
            prec.tail_switch, prec.max_steps,
        )
        if bool(carry.ok) and float(carry.s) < math.inf:
            raise IntegrationError(
                f"Step limit of {prec.max_steps} reached at s = {float(carry.s):g} "
                "while integrating to infinity"
            )
        if bool(carry.ok):
            # E^2 stayed finite up to s = inf: the time integral diverges.
            truncated_at = float(carry.s)
            logger.debug("E^2 finite up to s = inf, no origin of time")
        elif float(carry.e2_stop) != math.inf:
            # Only an overflow to +inf ends the tail; E^2 <= 0 or NaN is a bad model.
            truncated_at = float(carry.s)
            logger.debug("E^2 = %g past s = %g on the way to infinity",
                         float(carry.e2_stop), truncated_at)

    if truncated_at is None:
        th_at_infinity = float(carry.th)
        ths_at_infinity = float(carry.ths) - ths_at_one
        logger.debug("Reached infinity (E^2 overflow past s = %g) after %d steps",
                     float(carry.s), int(carry.n))
    else:
        th_at_infinity = ths_at_infinity = math.nan

    integration_results = [
        IntegrationResult(s, th, ths - ths_at_one, n, last_step)
        for s, th, ths, n, last_step in results
    ]
    if math.inf in requested and truncated_at is None:
        integration_results.append(IntegrationResult(
            math.inf, th_at_infinity, ths_at_infinity, int(carry.n), float(carry.last_step),
        ))

    return IntegrationOutput(
        results=integration_results,
        th_at_one=th_at_one,
        th_at_infinity=th_at_infinity,
        ths_at_infinity=ths_at_infinity,
        phase=phase,
        n_steps=int(carry.n),
        truncated_at=truncated_at,
    )
