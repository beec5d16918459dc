"""Test the ExpansionModel facade."""

import pytest

from jaxexpansion.model import ExpansionModel, create_model
from jaxexpansion.params import ModelParams, PrecisionParams
from tests.conftest import assert_close


class TestCreateModel:

    def test_default_is_planck2018(self):
        model = create_model()
        assert model.params == ModelParams.from_survey("planck2018")
        assert model.prec == PrecisionParams()

    def test_survey_name_with_overrides(self):
        model = create_model("planck2015", H0=70.0)
        assert model.params.H0 == 70.0
        assert model.params.Omega_lambda == 0.691

    def test_params_instance(self):
        params = ModelParams(H0=72.0)
        assert create_model(params).params is params
        assert create_model(params, Omega_lambda=0.5).params.Omega_lambda == 0.5

    def test_precision(self):
        prec = PrecisionParams.fast()
        assert create_model(prec=prec).prec is prec

    def test_unknown_survey(self):
        with pytest.raises(KeyError):
            create_model("sdss")

    def test_bad_config_type(self):
        with pytest.raises(TypeError, match="config"):
            create_model(67.66)


@pytest.fixture(scope="module")
def model(planck2018, prec):
    return ExpansionModel(params=planck2018, prec=prec)


class TestExpansionModel:

    def test_e_squared_now(self, model):
        assert_close(model.e_squared_at_stretch(1.0), 1.0, rtol=1e-14, name="E^2(1)")

    def test_variables(self, model):
        v = model.variables_at_stretch(2.0)
        assert_close(v.temperature, 2.0 * model.params.T_cmb, rtol=1e-15, name="T(2)")

    def test_age_matches_records(self, model):
        (now,) = model.calculate_expansion([1.0])
        assert now.t == model.calculate_age()
        assert abs(now.t - 13.787) < 5e-4
