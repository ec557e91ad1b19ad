"""Built-in arithmetic self-checks rendered under the planner."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from brew_calc import (
    TOTAL_PER_CARTON_OZ,
    Flavor,
    bases,
    capacity_bottles,
    pack,
    plan_by_bottles,
    scale_by_cartons,
    scale_by_fraction,
    top_off,
)

logger = logging.getLogger(__name__)

CheckFn = Callable[[], Union[bool, str]]


@dataclass(frozen=True)
class CheckResult:
    name: str
    ok: bool
    message: str = ""


def approx_eq(a: float, b: float, eps: float = 1e-6) -> bool:
    return abs(a - b) < eps


def _tiki_one_carton():
    x = scale_by_cartons(Flavor.TIKI_CHATA, 1)
    ok = (x.coconut, x.horchata, x.coffee, x.water, x.ube_tbsp, x.total_oz) == (32, 16, 59, 59, 0, 166)
    return ok or f"unexpected {x}"


def _ube_two_cartons():
    x = scale_by_cartons(Flavor.DIRTY_UBE, 2)
    return (x.ube_tbsp == 3 and x.total_oz == 332) or (
        f"expected ube=3, total=332 got {x.ube_tbsp}, {x.total_oz}"
    )


def _pack_one_carton():
    y = pack(166, 12)
    return (y.full_bottles == 13 and approx_eq(y.remainder_oz, 10)) or (
        f"expected 13 & 10, got {y.full_bottles} & {y.remainder_oz}"
    )


def _top_off_22():
    t = top_off(22, 12)
    return (t.extra_bottles == 1 and approx_eq(t.leftover_oz, 10)) or (
        f"expected 1 & 10, got {t.extra_bottles} & {t.leftover_oz}"
    )


def _bases_tiki_one_carton():
    b = bases(scale_by_cartons(Flavor.TIKI_CHATA, 1))
    ok = b.horchata_base_oz == 48 and b.cold_brew_base_oz == 118 and b.total_mix_oz == 166
    return ok or f"unexpected {b}"


def _ube_half_carton():
    x = scale_by_fraction(Flavor.DIRTY_UBE, 0.5)
    return (approx_eq(x.ube_tbsp, 0.75) and approx_eq(x.total_oz, 83)) or (
        f"expected ube=0.75 total=83 got {x.ube_tbsp} & {x.total_oz}"
    )


def _capacity_one_carton():
    cap = capacity_bottles(1, 12)
    left = TOTAL_PER_CARTON_OZ % 12
    return (cap == 13 and approx_eq(left, 10)) or f"expected 13 & 10, got {cap} & {left}"


def _bottle_split_ube_one():
    p = plan_by_bottles(1, 12, Flavor.DIRTY_UBE, 1)
    used = p.lead_scaled.total_oz + p.other_scaled.total_oz
    expected = p.capacity_bottles * p.bottle_size
    ok = p.other_bottles == 12 and approx_eq(p.remainder_oz, 10) and approx_eq(used, expected)
    return ok or (
        f"expected other=12 rem=10 sum={expected} "
        f"got other={p.other_bottles} rem={p.remainder_oz} sum={used}"
    )


CHECKS: List[Tuple[str, CheckFn]] = [
    ("scale tiki (1 carton)", _tiki_one_carton),
    ("scale dirty ube (2 cartons)", _ube_two_cartons),
    ("pack 166 oz @12", _pack_one_carton),
    ("top off 22 @12", _top_off_22),
    ("bases tiki (1 carton)", _bases_tiki_one_carton),
    ("fractional dirty ube (0.5 carton)", _ube_half_carton),
    ("capacity @1 carton, 12 oz", _capacity_one_carton),
    ("bottle split ube=1 (1 carton @12)", _bottle_split_ube_one),
]


def run_checks(checks: Optional[Sequence[Tuple[str, CheckFn]]] = None) -> List[CheckResult]:
    """Run every check; a failing or raising check becomes a failed result."""
    results = []
    for name, run in CHECKS if checks is None else checks:
        try:
            outcome = run()
        except Exception as e:  # reported inline, never fatal to the page
            logger.exception("Self-check %r raised", name)
            results.append(CheckResult(name, False, str(e) or type(e).__name__))
            continue
        ok = outcome is True
        if not ok:
            logger.warning("Self-check %r failed: %s", name, outcome)
        results.append(CheckResult(name, ok, "" if ok else str(outcome)))
    return results
