"""Physical constants and unit conversions for jaxexpansion.

Times are in Gyr and distances in Gly throughout (c = 1), so a Hubble rate
in Gyr^-1 is also the inverse of a Hubble radius in Gly. Densities are in
kg/m^3.

References:
    IAU measuring units: https://www.iau.org/public/themes/measuring/
"""

import math

# --- Time ---
gyr_to_seconds = 3.15576e16
"""Seconds in a gigayear: 1e9 Julian years of 365.25 days of 86400 s."""

# --- Hubble rate ---
# 1 pc = 648000 / pi au and 1 au = 149 597 870 700 m, so
# 1 km/s/Mpc = 1e3 / (1e6 pc in m) s^-1, times gyr_to_seconds for Gyr^-1.
kmsmpsc_to_gyr = 1.022712165045695e-3
"""Multiply a Hubble rate in km/s/Mpc by this to get Gyr^-1."""

legacy_hubble_factor = 978.0
"""Rounded inverse of `kmsmpsc_to_gyr` used by the legacy parameterization
(Ynow = 978 / H0)."""

# --- Density ---
rho_const = 1.7884453398696718e9
"""3 / (8 pi G) in kg s^2 / m^3, so that rho_crit = rho_const * H[s^-1]^2."""

# --- Distance ---
gly_per_gpc = 648_000.0 / math.pi * 149_597_870_700.0 / 9_460_730_472_580_800.0
"""Light years per parsec (~3.26156), hence Gly per Gpc."""

# --- CMB temperature ---
T_cmb_default = 2.72548
"""Default CMB temperature today in Kelvin (Fixsen 2009)."""
