"""Test fixtures for the jaxexpansion test suite.

Provides:
- Default ModelParams and PrecisionParams
- --fast flag selecting the coarse integrator preset
- Relative-error helpers with readable failure messages
"""

# Enable 64-bit JAX (the integrator needs double precision)
import jax
jax.config.update("jax_enable_x64", True)

import numpy as np
import pytest

from jaxexpansion.params import ModelParams, PrecisionParams


def pytest_addoption(parser):
    parser.addoption(
        "--fast", action="store_true", default=False,
        help="Use the coarse integrator preset (PrecisionParams.fast())"
    )


@pytest.fixture(scope="session")
def fast_mode(request):
    return request.config.getoption("--fast")


@pytest.fixture(scope="session")
def prec(fast_mode):
    """Integrator settings for the run."""
    return PrecisionParams.fast() if fast_mode else PrecisionParams()


@pytest.fixture(scope="session")
def planck2018():
    return ModelParams.from_survey("planck2018")


@pytest.fixture(scope="session")
def legacy_inputs():
    """Inputs of the legacy calculator for Planck 2015 parameters."""
    from jaxexpansion.legacy import LegacyInputs

    H0 = 67.74
    Omega_lambda = 0.691
    Ynow = 978.0 / H0
    return LegacyInputs(
        Ynow=Ynow,
        Yinf=Ynow / Omega_lambda ** 0.5,
        s_eq=3370.0,
        Omega=1.0,
        s_lower=-0.99 + 1.0,
        s_upper=1090.0 + 1.0,
        s_step=10,
        exponential=True,
    )


def relative_error(computed, reference, eps=1e-30):
    """Compute relative error, avoiding division by zero."""
    computed = np.asarray(computed, dtype=float)
    reference = np.asarray(reference, dtype=float)
    return np.abs(computed - reference) / (np.abs(reference) + eps)


def assert_close(computed, reference, rtol, name="quantity", coordinate=None):
    """Assert computed matches reference within rtol, with clear error message."""
    computed = np.atleast_1d(np.asarray(computed, dtype=float))
    reference = np.atleast_1d(np.asarray(reference, dtype=float))
    rel = relative_error(computed, reference)
    idx = int(np.argmax(rel))
    max_err = float(rel[idx])
    if max_err > rtol:
        coord_str = f" at index {idx}"
        if coordinate is not None:
            coord_str = f" at {np.atleast_1d(coordinate)[idx]:.6g}"
        msg = (
            f"{name}: max rel error {max_err:.4%}{coord_str}"
            f" (expected {reference[idx]:.6e}, got {computed[idx]:.6e})"
            f" -- tolerance {rtol:.4%}"
        )
        raise AssertionError(msg)
