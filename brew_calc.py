"""Pure calculation utilities for the cold brew bottle planner.

Everything here is a function of its explicit arguments: recipes scale by
32 fl oz coconut milk cartons, volumes pack into whole bottles, and one
production run is split between the two flavors either by cartons or by
bottles. Bad numeric input is normalized, never rejected.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Any, Dict

from babel.numbers import format_decimal

logger = logging.getLogger(__name__)

TOTAL_PER_CARTON_OZ = 32 + 16 + 59 + 59  # 166 (ube tbsp excluded)
OZ_PER_QT = 32
ML_PER_OZ = 29.5735
DEFAULT_BOTTLE_OZ = 12.0
UBE_TBSP_PER_CARTON = 1.5

CARTON_PRESETS = (1, 2, 3)
BOTTLE_PRESETS = (10, 12, 16)
SPLIT_MODES = ("cartons", "bottles")


class Flavor(str, Enum):
    TIKI_CHATA = "tikiChata"
    DIRTY_UBE = "dirtyUbe"

    @property
    def other(self) -> "Flavor":
        return Flavor.TIKI_CHATA if self is Flavor.DIRTY_UBE else Flavor.DIRTY_UBE

    @property
    def label(self) -> str:
        return "Dirty Ube" if self is Flavor.DIRTY_UBE else "Tiki Chata"


@dataclass(frozen=True)
class Recipe:
    """Ingredients for one carton; ube is in tbsp, the rest in fl oz."""

    coconut_oz: float
    horchata_oz: float
    coffee_conc_oz: float
    water_oz: float
    ube_tbsp: float = 0.0

    @property
    def total_oz(self) -> float:
        return self.coconut_oz + self.horchata_oz + self.coffee_conc_oz + self.water_oz


RECIPES: Dict[Flavor, Recipe] = {
    Flavor.TIKI_CHATA: Recipe(32, 16, 59, 59, 0),
    Flavor.DIRTY_UBE: Recipe(32, 16, 59, 59, UBE_TBSP_PER_CARTON),
}


@dataclass(frozen=True)
class ScaledBatch:
    """A recipe multiplied by k cartons; total_oz leaves out the ube tbsp."""

    k: float
    coconut: float
    horchata: float
    coffee: float
    water: float
    ube_tbsp: float
    total_oz: float


@dataclass(frozen=True)
class YieldResult:
    """Whole bottles filled from a volume, plus what is left over."""

    full_bottles: int
    remainder_oz: float


@dataclass(frozen=True)
class TopOff:
    """Extra bottles filled from pooled remainders."""

    extra_bottles: int
    leftover_oz: float


@dataclass(frozen=True)
class BasesSummary:
    """The two pre-mix bases of a batch and their sum."""

    horchata_base_oz: float
    cold_brew_base_oz: float
    total_mix_oz: float


# -----------------------------------------------------------------------------
# Units & display
# -----------------------------------------------------------------------------
def to_number(x: Any) -> float:
    """Coerce raw input to a finite float; anything unusable counts as 0."""
    try:
        n = float(x)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(n) or math.isinf(n):
        return 0.0
    return n


def to_qt(oz: float) -> float:
    return oz / OZ_PER_QT


def to_ml(oz: float) -> float:
    return oz * ML_PER_OZ


def _cents_precision(d: Decimal) -> int:
    # digits needed to hold d quantized to 0.01
    return max(28, d.adjusted() + 3)


def round2(n: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    d = Decimal(repr(to_number(n)))
    with localcontext() as ctx:
        ctx.prec = _cents_precision(d)
        return float(d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_number(n: float, locale: str = "en_US") -> str:
    """Format with up to 2 decimals, trailing zeros dropped."""
    value = round2(n)
    with localcontext() as ctx:
        ctx.prec = _cents_precision(Decimal(repr(value)))
        return format_decimal(value, format="#,##0.##", locale=locale)


def unit_triplet(oz: float, locale: str = "en_US") -> str:
    return (
        f"{format_number(oz, locale)} fl oz · "
        f"{format_number(to_qt(oz), locale)} qt · "
        f"{format_number(to_ml(oz), locale)} mL"
    )


# -----------------------------------------------------------------------------
# Scaling
# -----------------------------------------------------------------------------
def whole_cartons(x: Any) -> int:
    """Floor to a non-negative whole carton count."""
    return max(0, math.floor(to_number(x)))


def _scale(recipe: Recipe, k: float) -> ScaledBatch:
    coconut = recipe.coconut_oz * k
    horchata = recipe.horchata_oz * k
    coffee = recipe.coffee_conc_oz * k
    water = recipe.water_oz * k
    ube_tbsp = (recipe.ube_tbsp or 0) * k
    total_oz = coconut + horchata + coffee + water  # ube tbsp excluded
    return ScaledBatch(k, coconut, horchata, coffee, water, ube_tbsp, total_oz)


def scale_by_cartons(flavor: Flavor | str, cartons: Any) -> ScaledBatch:
    """Scale a flavor's recipe by a whole number of cartons."""
    return _scale(RECIPES[Flavor(flavor)], whole_cartons(cartons))


def scale_by_fraction(flavor: Flavor | str, cartons_eq: Any) -> ScaledBatch:
    """Scale a flavor's recipe by a (possibly fractional) carton equivalent."""
    return _scale(RECIPES[Flavor(flavor)], max(0.0, to_number(cartons_eq)))


def reference_batches(cartons: Any) -> Dict[Flavor, ScaledBatch]:
    """Each flavor as if every carton went into it."""
    return {flavor: scale_by_cartons(flavor, cartons) for flavor in Flavor}


def bases(batch: ScaledBatch) -> BasesSummary:
    return BasesSummary(
        horchata_base_oz=batch.coconut + batch.horchata,
        cold_brew_base_oz=batch.coffee + batch.water,
        total_mix_oz=batch.total_oz,
    )


# -----------------------------------------------------------------------------
# Bottles
# -----------------------------------------------------------------------------
def clamp_bottle_size(size: Any) -> float:
    return max(1.0, to_number(size))


def pack(volume_oz: Any, bottle_size: Any) -> YieldResult:
    """Fill whole bottles from a volume; the rest is remainder."""
    size = clamp_bottle_size(bottle_size)
    volume = max(0.0, to_number(volume_oz))
    full = math.floor(volume / size)
    return YieldResult(full_bottles=full, remainder_oz=volume - full * size)


def top_off(remainder_oz: Any, bottle_size: Any) -> TopOff:
    """Extra bottles that pooled leftovers can still fill."""
    y = pack(remainder_oz, bottle_size)
    return TopOff(extra_bottles=y.full_bottles, leftover_oz=y.remainder_oz)


def capacity_bottles(cartons: Any, bottle_size: Any) -> int:
    capacity_oz = max(0.0, to_number(cartons)) * TOTAL_PER_CARTON_OZ
    return math.floor(capacity_oz / clamp_bottle_size(bottle_size))


def clamp_count(value: Any, upper: int) -> int:
    """Floor ``value`` and clamp it into ``[0, upper]``."""
    return max(0, min(math.floor(to_number(value)), max(0, upper)))


# -----------------------------------------------------------------------------
# Split by cartons
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class DirectSplitPlan:
    total_cartons: int
    bottle_size: float
    lead_flavor: Flavor
    lead_cartons: int
    other_cartons: int
    lead_scaled: ScaledBatch
    other_scaled: ScaledBatch
    lead_yield: YieldResult
    other_yield: YieldResult
    combined_remainder_oz: float
    top_off: TopOff

    @property
    def other_flavor(self) -> Flavor:
        return self.lead_flavor.other

    @property
    def total_full_bottles(self) -> int:
        return self.lead_yield.full_bottles + self.other_yield.full_bottles

    def batch_for(self, flavor: Flavor | str) -> ScaledBatch:
        return self.lead_scaled if Flavor(flavor) is self.lead_flavor else self.other_scaled

    def yield_for(self, flavor: Flavor | str) -> YieldResult:
        return self.lead_yield if Flavor(flavor) is self.lead_flavor else self.other_yield


def plan_direct_split(
    total_cartons: Any,
    lead_cartons: Any,
    bottle_size: Any,
    lead_flavor: Flavor | str = Flavor.DIRTY_UBE,
) -> DirectSplitPlan:
    """Split whole cartons between the flavors; the lead count sets the other.

    Each flavor is brewed and bottled on its own. Their remainders are then
    pooled to see how many extra bottles the leftovers fill.
    """
    lead_flavor = Flavor(lead_flavor)
    total = whole_cartons(total_cartons)
    lead = clamp_count(lead_cartons, total)
    other = max(0, total - lead)
    size = clamp_bottle_size(bottle_size)

    lead_scaled = scale_by_cartons(lead_flavor, lead)
    other_scaled = scale_by_cartons(lead_flavor.other, other)
    lead_yield = pack(lead_scaled.total_oz, size)
    other_yield = pack(other_scaled.total_oz, size)
    combined = lead_yield.remainder_oz + other_yield.remainder_oz

    return DirectSplitPlan(
        total_cartons=total,
        bottle_size=size,
        lead_flavor=lead_flavor,
        lead_cartons=lead,
        other_cartons=other,
        lead_scaled=lead_scaled,
        other_scaled=other_scaled,
        lead_yield=lead_yield,
        other_yield=other_yield,
        combined_remainder_oz=combined,
        top_off=top_off(combined, size),
    )


# -----------------------------------------------------------------------------
# Split by bottles (lead clamps; other auto-fills)
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ContainerSplitPlan:
    capacity_oz: float
    capacity_bottles: int
    bottle_size: float
    lead_flavor: Flavor
    other_flavor: Flavor
    lead_bottles: int
    other_bottles: int
    remainder_oz: float
    lead_scaled: ScaledBatch
    other_scaled: ScaledBatch

    @property
    def planned_bottles(self) -> int:
        return self.lead_bottles + self.other_bottles


def plan_by_bottles(
    total_cartons: Any,
    bottle_size: Any,
    lead_flavor: Flavor | str,
    requested_lead_bottles: Any,
) -> ContainerSplitPlan:
    """Give the lead flavor its bottles, the other flavor the rest of capacity.

    Bottle counts rarely line up with whole cartons, so each side is scaled
    by the fractional carton equivalent of the volume it actually bottles.
    The split is relative to whichever flavor leads.
    """
    lead_flavor = Flavor(lead_flavor)
    other_flavor = lead_flavor.other
    size = clamp_bottle_size(bottle_size)
    capacity_oz = max(0.0, to_number(total_cartons)) * TOTAL_PER_CARTON_OZ
    capacity = math.floor(capacity_oz / size)

    lead_bottles = clamp_count(requested_lead_bottles, capacity)
    other_bottles = capacity - lead_bottles

    lead_used_oz = lead_bottles * size
    other_used_oz = other_bottles * size
    remainder_oz = capacity_oz - (lead_used_oz + other_used_oz)  # < size

    return ContainerSplitPlan(
        capacity_oz=capacity_oz,
        capacity_bottles=capacity,
        bottle_size=size,
        lead_flavor=lead_flavor,
        other_flavor=other_flavor,
        lead_bottles=lead_bottles,
        other_bottles=other_bottles,
        remainder_oz=remainder_oz,
        lead_scaled=scale_by_fraction(lead_flavor, lead_used_oz / TOTAL_PER_CARTON_OZ),
        other_scaled=scale_by_fraction(other_flavor, other_used_oz / TOTAL_PER_CARTON_OZ),
    )


# -----------------------------------------------------------------------------
# Controls & recompute
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Controls:
    """One snapshot of everything the operator can edit."""

    cartons: int = 1
    bottle_size: float = DEFAULT_BOTTLE_OZ
    mode: str = "cartons"
    ube_cartons: int = 0
    lead_flavor: Flavor = Flavor.DIRTY_UBE
    lead_bottles: int = 0


@dataclass(frozen=True)
class PlannerSnapshot:
    controls: Controls
    reference: Dict[Flavor, ScaledBatch]
    reference_yield: YieldResult
    reference_bases: BasesSummary
    direct: DirectSplitPlan
    by_bottles: ContainerSplitPlan


def clamp_controls(controls: Controls) -> Controls:
    """Bring every control back into the range its upstream inputs allow.

    Must run after any upstream change and before a planner sees the values.
    """
    cartons = whole_cartons(controls.cartons)
    size = clamp_bottle_size(controls.bottle_size)
    mode = controls.mode if controls.mode in SPLIT_MODES else SPLIT_MODES[0]
    try:
        lead_flavor = Flavor(controls.lead_flavor)
    except ValueError:
        logger.debug("Unknown lead flavor %r, using %s", controls.lead_flavor, Flavor.DIRTY_UBE.value)
        lead_flavor = Flavor.DIRTY_UBE

    ube_cartons = clamp_count(controls.ube_cartons, cartons)
    lead_bottles = clamp_count(controls.lead_bottles, capacity_bottles(cartons, size))
    if ube_cartons != controls.ube_cartons:
        logger.debug("Clamped ube cartons %r -> %d (of %d)", controls.ube_cartons, ube_cartons, cartons)
    if lead_bottles != controls.lead_bottles:
        logger.debug("Clamped lead bottles %r -> %d", controls.lead_bottles, lead_bottles)

    return Controls(
        cartons=cartons,
        bottle_size=size,
        mode=mode,
        ube_cartons=ube_cartons,
        lead_flavor=lead_flavor,
        lead_bottles=lead_bottles,
    )


def recompute(controls: Controls) -> PlannerSnapshot:
    """Derive every displayed value from scratch for one control snapshot."""
    c = clamp_controls(controls)
    reference = reference_batches(c.cartons)
    # both flavors share the same volumes; only ube tbsp differs
    ref = reference[Flavor.TIKI_CHATA]
    return PlannerSnapshot(
        controls=c,
        reference=reference,
        reference_yield=pack(ref.total_oz, c.bottle_size),
        reference_bases=bases(ref),
        direct=plan_direct_split(c.cartons, c.ube_cartons, c.bottle_size, Flavor.DIRTY_UBE),
        by_bottles=plan_by_bottles(c.cartons, c.bottle_size, c.lead_flavor, c.lead_bottles),
    )
