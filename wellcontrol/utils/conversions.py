# wellcontrol/utils/conversions.py
import math

# Standard gravity (m/s²)
G = 9.80665

# Fann 35 viscometer: dial reading -> shear stress (Pa)
FANN35_DIAL_TO_PA = 0.478802
# Shear rate at 600 RPM (1/s), γ ≈ rpm × 1.7033
FANN35_600RPM_SHEAR_RATE = 1022.0

# Floors used to keep interpolation and rheology denominators finite
INTERP_EPSILON = 1e-12
MIN_VISCOSITY_PA_S = 1e-9

# Burkhardt clinging constant base value
CLINGING_CONSTANT_BASE = 0.45


def pa_to_kpa(p_pa):
    """Convert pressure from Pa to kPa."""
    return p_pa / 1000.0

def m_per_min_to_m_per_s(v):
    """Convert a hoist/run speed from m/min to m/s."""
    return v / 60.0

def cp_to_pa_s(mu_cp):
    """Convert viscosity from centipoise (mPa·s) to Pa·s."""
    return mu_cp / 1000.0

def dial_to_pa(dial):
    """Convert a Fann 35 dial reading to shear stress in Pa."""
    return dial * FANN35_DIAL_TO_PA

def circle_area(d):
    """Area of a circle of diameter d."""
    return math.pi / 4.0 * d * d

def hydrostatic_gradient_kpa_per_m(density_kgm3):
    """Hydrostatic gradient of a uniform fluid (kPa/m)."""
    return density_kgm3 * G / 1000.0

def equivalent_density_kgm3(pressure_kpa, tvd_m):
    """
    Density of a uniform column that produces the given pressure at a TVD.

    Returns 0 for a non-positive TVD.
    """
    if tvd_m <= 0:
        return 0.0
    return pressure_kpa * 1000.0 / (G * tvd_m)
