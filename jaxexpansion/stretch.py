"""Stretch grids: the s values at which expansion results are reported.

A request is either an explicit list of stretch values, used as given, or a
range (upper, lower) with a number of steps that is expanded here into evenly
spaced values, linearly or exponentially.

Stretch values run in descending order: from the past (s > 1) through now
(s = 1) to the future (s < 1). When a range straddles s = 1 the steps are
split between the parts above and below one so that 1.0 itself is one of the
grid points, exactly.

Key functions:
    stretch_values(upper, lower, steps, spacing) -> list[float]
    StretchRequest(...).resolve()                -> list[float]
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from jaxexpansion.errors import InvalidStretchError

logger = logging.getLogger(__name__)

SPACINGS = ("linear", "exponential")


# ---------------------------------------------------------------------------
# Even steps between two bounds
# ---------------------------------------------------------------------------

def _add_linear_values(values: list, upper: float, lower: float, count: int) -> list:
    """Append `count` linearly decreasing values after `upper`, ending on `lower`."""
    step = (upper - lower) / count
    current = upper
    for _ in range(count - 1):
        current -= step
        values.append(current)
    values.append(lower)
    return values


def _add_exponential_values(values: list, upper: float, lower: float, count: int) -> list:
    """Append `count` geometrically decreasing values after `upper`, ending on `lower`."""
    factor = (lower / upper) ** (1.0 / count)
    current = upper
    for _ in range(count - 1):
        current *= factor
        values.append(current)
    values.append(lower)
    return values


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _split_steps(upper: float, lower: float, steps: int, spacing: str) -> int:
    """Number of the `steps` that fall below s = 1 for a straddling range."""
    if spacing == "exponential":
        factor = (lower / upper) ** (1.0 / steps)
        count_lower = _round_half_up(math.log(lower) / math.log(factor))
    else:
        step = (upper - lower) / steps
        count_lower = _round_half_up((1.0 - lower) / step)

    clamped = min(max(count_lower, 1), steps - 1)
    if clamped != count_lower:
        logger.warning(
            "Moved %d of %d steps to keep s = 1 inside [%g, %g]",
            abs(clamped - count_lower), steps, lower, upper,
        )
    return clamped


def stretch_values(
    upper: float,
    lower: float,
    steps: int,
    spacing: str = "linear",
) -> list:
    """Evenly spaced stretch values from `upper` down to `lower`.

    Args:
        upper: first (largest) stretch value
        lower: last (smallest) stretch value, 0 < lower < upper
        steps: number of intervals; the result has steps + 1 values
        spacing: "linear" (arithmetic) or "exponential" (geometric)

    Returns:
        Strictly decreasing list of floats. If lower < 1 < upper, exactly one
        of them is 1.0.
    """
    if spacing not in SPACINGS:
        raise ValueError(f"Unknown spacing: {spacing!r}")
    if isinstance(steps, bool) or not isinstance(steps, int) or steps < 1:
        raise InvalidStretchError(f"steps must be a positive integer, got {steps!r}")
    if not (math.isfinite(upper) and math.isfinite(lower)):
        raise InvalidStretchError(
            f"Stretch range bounds must be finite, got ({upper!r}, {lower!r})"
        )
    if not 0.0 < lower < upper:
        raise InvalidStretchError(
            f"Stretch range needs 0 < lower < upper, got upper={upper!r} lower={lower!r}"
        )

    add_values = _add_exponential_values if spacing == "exponential" else _add_linear_values
    values = [upper]

    if lower >= 1.0 or upper <= 1.0:
        # s = 1 is outside the range (or one of its bounds): even steps all the way.
        return add_values(values, upper, lower, steps)

    if steps < 2:
        raise InvalidStretchError(
            "A stretch range around s = 1 needs at least 2 steps to include s = 1"
        )
    count_lower = _split_steps(upper, lower, steps, spacing)
    add_values(values, upper, 1.0, steps - count_lower)
    add_values(values, 1.0, lower, count_lower)
    return values


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StretchRequest:
    """Stretch values to calculate at.

    With `steps` unset (None or 0), or a single value, `stretch` is the
    explicit list of values in descending order. Otherwise `stretch` is the
    pair (upper, lower) to be expanded with `stretch_values`.

    An explicit list may start with math.inf, the origin of time.
    """

    stretch: Sequence[float]
    steps: Optional[int] = None
    spacing: str = "linear"

    def __post_init__(self):
        object.__setattr__(self, "stretch", tuple(float(s) for s in self.stretch))

    @property
    def is_explicit(self) -> bool:
        return not self.steps or len(self.stretch) == 1

    def resolve(self) -> list:
        """Return the stretch values to calculate at, validated."""
        if self.spacing not in SPACINGS:
            raise ValueError(f"Unknown spacing: {self.spacing!r}")
        if self.is_explicit:
            if self.steps is not None and self.steps < 0:
                raise InvalidStretchError(f"steps must not be negative, got {self.steps!r}")
            values = list(self.stretch)
            validate_stretch_values(values)
            return values

        if len(self.stretch) != 2:
            raise InvalidStretchError(
                f"A stretch range is given as (upper, lower), got {self.stretch!r}"
            )
        upper, lower = self.stretch
        return stretch_values(upper, lower, self.steps, self.spacing)


def validate_stretch_values(values: Sequence[float]) -> None:
    """Check explicit stretch values: non-empty, positive, strictly decreasing.

    Only the first value may be infinite.
    """
    if len(values) == 0:
        raise InvalidStretchError("No stretch values given")
    for i, s in enumerate(values):
        if math.isnan(s) or s <= 0.0:
            raise InvalidStretchError(f"Stretch values must be positive, got {s!r}")
        if math.isinf(s) and i > 0:
            raise InvalidStretchError("Only the first stretch value may be infinite")
    for previous, current in zip(values, values[1:]):
        if not current < previous:
            raise InvalidStretchError(
                f"Stretch values must be strictly decreasing, got {previous!r} "
                f"followed by {current!r}"
            )


def as_request(request) -> StretchRequest:
    """Accept a StretchRequest or a plain sequence of explicit stretch values."""
    if isinstance(request, StretchRequest):
        return request
    return StretchRequest(stretch=request)
