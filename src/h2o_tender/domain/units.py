"""Unit conversion between canonical units and display units.

Everything inside the core is kilograms and milliliters. Conversions to and
from imperial units happen only here, at the presentation boundary.
"""

from h2o_tender.domain.profile import WeightUnit

KG_PER_LB = 0.45359237
ML_PER_FL_OZ = 29.5735295625
_ML_PER_LITER = 1000


def lbs_to_kg(pounds: float) -> float:
    """Convert pounds to kilograms."""
    return pounds * KG_PER_LB


def kg_to_lbs(kilograms: float) -> float:
    """Convert kilograms to pounds."""
    return kilograms / KG_PER_LB


def to_kilograms(weight: float, unit: WeightUnit) -> float:
    """Convert a weight entered in ``unit`` to kilograms."""
    if unit is WeightUnit.LBS:
        return round(lbs_to_kg(weight), 2)
    return weight


def from_kilograms(weight_kg: float, unit: WeightUnit) -> float:
    """Convert a canonical weight to ``unit`` for display."""
    if unit is WeightUnit.LBS:
        return round(kg_to_lbs(weight_kg), 1)
    return round(weight_kg, 1)


def ml_to_fl_oz(milliliters: int) -> float:
    """Convert milliliters to US fluid ounces."""
    return milliliters / ML_PER_FL_OZ


def format_volume(milliliters: int, unit: WeightUnit = WeightUnit.KG) -> str:
    """Format a volume for display, e.g. ``250 ml``, ``1.5 L`` or ``8.5 fl oz``."""
    if unit is WeightUnit.LBS:
        return f"{ml_to_fl_oz(milliliters):.1f} fl oz"
    if milliliters >= _ML_PER_LITER:
        return f"{milliliters / _ML_PER_LITER:.1f} L"
    return f"{milliliters} ml"
