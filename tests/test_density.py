"""Test the density model E^2(s) and the derived background quantities."""

import math

import jax.numpy as jnp
import numpy as np
import pytest

from jaxexpansion.density import (
    density_coefficients,
    e_squared,
    kernels,
    variables_at_infinity,
    variables_at_stretch,
)
from jaxexpansion.params import ModelParams
from tests.conftest import assert_close


@pytest.fixture(scope="module")
def coeffs(planck2018):
    return density_coefficients(planck2018)


class TestESquared:

    def test_now_is_one(self, coeffs):
        """The four fractions sum to one, so E^2(1) = 1."""
        assert abs(float(e_squared(1.0, coeffs)) - 1.0) < 1e-14

    def test_future_asymptote(self, coeffs, planck2018):
        assert float(e_squared(0.0, coeffs)) == planck2018.Omega_lambda

    def test_polynomial(self, planck2018, coeffs):
        s = 3.5
        expected = (planck2018.Omega_lambda + planck2018.Omega_k * s ** 2
                    + planck2018.Omega_m * s ** 3 + planck2018.Omega_r * s ** 4)
        assert_close(e_squared(s, coeffs), expected, rtol=1e-14, name="E^2(3.5)")

    def test_vectorized(self, coeffs):
        s = jnp.array([0.1, 1.0, 10.0, 1000.0])
        e2 = e_squared(s, coeffs)
        assert e2.shape == (4,)
        assert np.all(np.diff(np.asarray(e2)) > 0)

    def test_overflow_is_infinite_not_error(self, coeffs):
        e2 = float(e_squared(1e80, coeffs))
        assert e2 == math.inf

    def test_zero_terms_do_not_make_nan(self):
        """Omega_m = Omega_r = 0: the s^3 and s^4 terms drop out instead of 0 * inf."""
        coeffs = density_coefficients(ModelParams(Omega_0=0.0, Omega_lambda=0.0))
        s = jnp.asarray([2.0, 1e200])
        e2 = np.asarray(e_squared(s, coeffs))
        assert_close(e2[0], 4.0, rtol=1e-14, name="Milne E^2(2)")
        assert e2[1] == math.inf

    def test_kernels(self, coeffs):
        th, ths = kernels(4.0, coeffs)
        e = math.sqrt(float(e_squared(4.0, coeffs)))
        assert_close(th, 1.0 / e, rtol=1e-14, name="TH")
        assert_close(ths, 1.0 / (4.0 * e), rtol=1e-14, name="THs")


class TestVariablesAtStretch:

    def test_now(self, planck2018):
        v = variables_at_stretch(1.0, planck2018)
        assert_close(v.H, planck2018.H0, rtol=1e-14, name="H(s=1)")
        assert_close(v.Omega_m, planck2018.Omega_m, rtol=1e-14, name="Omega_m(s=1)")
        assert_close(v.Omega_lambda, planck2018.Omega_lambda, rtol=1e-14, name="Omega_lambda(s=1)")
        assert_close(v.Omega_r, planck2018.Omega_r, rtol=1e-14, name="Omega_r(s=1)")
        assert_close(v.temperature, planck2018.T_cmb, rtol=1e-15, name="T(s=1)")
        assert_close(v.rho_crit, planck2018.rho_crit0, rtol=1e-14, name="rho_crit(s=1)")

    def test_rho_crit_today(self, planck2018):
        """About 8.6e-27 kg/m^3 for H0 = 67.66."""
        rho = float(variables_at_stretch(1.0, planck2018).rho_crit)
        assert 8.5e-27 < rho < 8.7e-27, f"rho_crit = {rho:.3e}"

    @pytest.mark.parametrize("s", [1e-3, 0.5, 2.0, 1090.0, 1e6])
    def test_flat_total_is_one(self, planck2018, s):
        """Omega_total = 1 at every stretch for a flat model."""
        v = variables_at_stretch(s, planck2018)
        assert_close(v.Omega_total, 1.0, rtol=1e-10, name="Omega_total", coordinate=s)
        assert abs(float(v.Omega_k)) < 1e-10

    def test_equality(self, planck2018):
        """Matter and radiation fractions are equal at s_eq."""
        v = variables_at_stretch(planck2018.s_eq, planck2018)
        assert_close(v.Omega_m, v.Omega_r, rtol=1e-12, name="Omega_m vs Omega_r at s_eq")

    def test_temperature_scales_with_stretch(self, planck2018):
        v = variables_at_stretch(1091.0, planck2018)
        assert_close(v.temperature, 1091.0 * planck2018.T_cmb, rtol=1e-15, name="T")

    def test_elementwise(self, planck2018):
        s = jnp.geomspace(0.01, 1e4, 9)
        v = variables_at_stretch(s, planck2018)
        assert v.H.shape == (9,)
        for i, si in enumerate(np.asarray(s)):
            vi = variables_at_stretch(float(si), planck2018)
            assert_close(v.H[i], vi.H, rtol=1e-14, name="H", coordinate=si)

    def test_open_model_curvature(self):
        params = ModelParams(Omega_0=0.3, Omega_lambda=0.0)
        v = variables_at_stretch(2.0, params)
        total = float(v.Omega_total + v.Omega_k)
        assert_close(total, 1.0, rtol=1e-12, name="Omega_total + Omega_k")
        assert float(v.Omega_k) > 0.0


class TestVariablesAtInfinity:

    def test_radiation_dominates(self, planck2018):
        v = variables_at_infinity(planck2018)
        assert float(v.H) == math.inf
        assert float(v.Omega_r) == 1.0
        assert float(v.Omega_m) == 0.0
        assert float(v.Omega_lambda) == 0.0
        assert float(v.Omega_total) == 1.0
        assert float(v.temperature) == math.inf

    def test_matches_large_stretch(self, planck2018):
        v = variables_at_stretch(1e30, planck2018)
        limit = variables_at_infinity(planck2018)
        assert_close(v.Omega_r, limit.Omega_r, rtol=1e-10, name="Omega_r")
