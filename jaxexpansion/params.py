"""Parameter containers for jaxexpansion.

ModelParams: the cosmological model, with density fractions derived once.
PrecisionParams: numerical settings for the stretch integrator.

Both are frozen dataclasses; build new instances with the constructors,
`from_survey()` or `replace()` rather than mutating.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from jaxexpansion import constants as const
from jaxexpansion.surveys import DEFAULT_SURVEY, get_survey


# ---------------------------------------------------------------------------
# ModelParams: the LCDM model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelParams:
    """Lambda-CDM model parameters.

    Inputs:
        - H0: Hubble constant in km/s/Mpc
        - Omega_0: total density parameter (1 for a flat universe)
        - Omega_lambda: dark energy density parameter
        - z_eq: redshift of matter-radiation equality
        - T_cmb: CMB temperature today in Kelvin

    Derived in __post_init__ and never changed afterwards (s_eq = z_eq + 1):
        Omega_m = (Omega_0 - Omega_lambda) * s_eq / (s_eq + 1)
        Omega_r = Omega_m / s_eq
        Omega_k = 1 - Omega_m - Omega_r - Omega_lambda

    so that matter and radiation densities are equal at s = s_eq and the four
    fractions sum to one.
    """

    # Planck 2018
    H0: float = 67.66
    Omega_0: float = 1.0
    Omega_lambda: float = 0.6889
    z_eq: float = 3387.0
    T_cmb: float = const.T_cmb_default

    # Constants (overridable to reproduce other calculators)
    rho_const: float = const.rho_const
    gyr_to_seconds: float = const.gyr_to_seconds
    kmsmpsc_to_gyr: float = const.kmsmpsc_to_gyr

    # Derived
    Omega_m: float = field(init=False)
    Omega_r: float = field(init=False)
    Omega_k: float = field(init=False)
    H0_Gyr: float = field(init=False)      # H0 in Gyr^-1
    rho_crit0: float = field(init=False)   # critical density today [kg/m^3]

    def __post_init__(self):
        s_eq = self.z_eq + 1.0
        Omega_m = (self.Omega_0 - self.Omega_lambda) * s_eq / (s_eq + 1.0)
        Omega_r = Omega_m / s_eq
        H0_Gyr = self.H0 * self.kmsmpsc_to_gyr
        H0_seconds = H0_Gyr / self.gyr_to_seconds

        # frozen: bypass __setattr__ for the derived fields
        object.__setattr__(self, "Omega_m", Omega_m)
        object.__setattr__(self, "Omega_r", Omega_r)
        object.__setattr__(self, "Omega_k", 1.0 - Omega_m - Omega_r - self.Omega_lambda)
        object.__setattr__(self, "H0_Gyr", H0_Gyr)
        object.__setattr__(self, "rho_crit0", self.rho_const * H0_seconds * H0_seconds)

    @property
    def s_eq(self) -> float:
        """Stretch at matter-radiation equality."""
        return self.z_eq + 1.0

    @property
    def hubble_time(self) -> float:
        """1 / H0 in Gyr (numerically also the Hubble radius in Gly)."""
        return 1.0 / self.H0_Gyr

    @classmethod
    def from_survey(cls, name: str = DEFAULT_SURVEY, **overrides) -> ModelParams:
        """Build parameters from a named survey preset, then apply overrides."""
        values = dict(get_survey(name))
        values.update(overrides)
        return cls(**values)

    def replace(self, **kwargs) -> ModelParams:
        """Return a new ModelParams with specified input fields replaced."""
        current = {f.name: getattr(self, f.name) for f in fields(self) if f.init}
        current.update(kwargs)
        return ModelParams(**current)


# ---------------------------------------------------------------------------
# PrecisionParams: integrator settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PrecisionParams:
    """Numerical settings for the trapezoidal stretch integrator.

    The step starts at `initial_step` and is multiplied by a growth factor on
    every iteration, so its size grows geometrically and each phase needs a
    number of steps logarithmic in the range it covers.
    """

    initial_step: float = 1e-5          # first micro-step from s = 0
    growth: float = 1.0001              # step growth on the finite range
    tail_growth: float = 1.001          # step growth towards infinity...
    tail_fast_growth: float = 1.1       # ...and beyond tail_switch
    tail_switch: float = 4000.0         # stretch where the tail speeds up
    max_steps: int = 50_000_000         # hard limit over the whole walk

    @staticmethod
    def fast():
        """Coarse preset for quick checks.

        Ten times fewer steps on the finite range; ages and distances stay
        within ~1e-6 relative of the default preset.
        """
        return PrecisionParams(
            initial_step=1e-4,
            growth=1.001,
            tail_growth=1.01,
        )
