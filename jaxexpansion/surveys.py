"""Survey parameter presets.

Each preset fixes H0 (km/s/Mpc), Omega_lambda, z_eq, Omega_0 and T_cmb.
Anything not listed falls back to the `ModelParams` defaults.

References:
    Planck 2018: https://arxiv.org/abs/1807.06209
"""

from __future__ import annotations

from types import MappingProxyType

from jaxexpansion.constants import T_cmb_default

# TODO: check the Planck 2015 and WMAP 2013 triples against the papers.
planck2018 = MappingProxyType({
    "H0": 67.66,
    "Omega_lambda": 0.6889,
    "z_eq": 3387.0,
    "Omega_0": 1.0,
    "T_cmb": T_cmb_default,
})

planck2015 = MappingProxyType({
    "H0": 67.74,
    "Omega_lambda": 0.691,
    "z_eq": 3370.0,
    "Omega_0": 1.0,
    "T_cmb": T_cmb_default,
})

wmap2013 = MappingProxyType({
    "H0": 69.8,
    "Omega_lambda": 0.72,
    "z_eq": 3300.0,
    "Omega_0": 1.0,
    "T_cmb": T_cmb_default,
})

SURVEYS = MappingProxyType({
    "planck2018": planck2018,
    "planck2015": planck2015,
    "wmap2013": wmap2013,
})

DEFAULT_SURVEY = "planck2018"


def get_survey(name: str):
    """Return the (read-only) parameter mapping of a named survey."""
    try:
        return SURVEYS[name]
    except KeyError:
        raise KeyError(
            f"Unknown survey {name!r}; expected one of {sorted(SURVEYS)}"
        ) from None
