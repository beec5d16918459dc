"""jaxexpansion: expansion history of a Lambda-CDM universe in JAX.

Usage:
    import jaxexpansion

    model = jaxexpansion.create_model("planck2018")
    print(model.calculate_age())  # age now in Gyr

    records = model.calculate_expansion(
        jaxexpansion.StretchRequest((1091.0, 0.01), steps=10, spacing="exponential")
    )
    for r in records:
        print(r.z, r.t, r.d_now)
"""

import jax
jax.config.update("jax_enable_x64", True)

from jaxexpansion import constants  # noqa: F401
from jaxexpansion.params import ModelParams, PrecisionParams  # noqa: F401
from jaxexpansion.surveys import SURVEYS, get_survey  # noqa: F401
from jaxexpansion.errors import (  # noqa: F401
    ExpansionError,
    IntegrationError,
    InvalidStretchError,
    NonFiniteDensityError,
)
from jaxexpansion.density import (  # noqa: F401
    DensitySnapshot,
    e_squared,
    variables_at_infinity,
    variables_at_stretch,
)
from jaxexpansion.stretch import StretchRequest, stretch_values  # noqa: F401
from jaxexpansion.integrate import IntegrationPhase, integrate_kernels  # noqa: F401
from jaxexpansion.expansion import ExpansionRecord, calculate_age, calculate_expansion  # noqa: F401
from jaxexpansion.model import ExpansionModel, create_model  # noqa: F401
from jaxexpansion.units import scale_records  # noqa: F401

__version__ = "0.1.0"
