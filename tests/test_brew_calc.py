import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from brew_calc import (
    TOTAL_PER_CARTON_OZ,
    Controls,
    Flavor,
    TopOff,
    YieldResult,
    bases,
    capacity_bottles,
    clamp_bottle_size,
    clamp_controls,
    format_number,
    pack,
    plan_by_bottles,
    plan_direct_split,
    recompute,
    reference_batches,
    round2,
    scale_by_cartons,
    scale_by_fraction,
    to_ml,
    to_qt,
    top_off,
    unit_triplet,
)


def test_scale_tiki_one_carton():
    x = scale_by_cartons(Flavor.TIKI_CHATA, 1)
    assert (x.coconut, x.horchata, x.coffee, x.water) == (32, 16, 59, 59)
    assert x.ube_tbsp == 0
    assert x.total_oz == 166


def test_scale_dirty_ube_two_cartons():
    x = scale_by_cartons("dirtyUbe", 2)
    assert x.ube_tbsp == 3
    assert x.total_oz == 332


@pytest.mark.parametrize("k", [0, 1, 2, 7, 25])
def test_whole_and_fractional_scaling_agree(k):
    for flavor in Flavor:
        assert scale_by_cartons(flavor, k).total_oz == scale_by_fraction(flavor, k).total_oz
        assert scale_by_cartons(flavor, k) == scale_by_fraction(flavor, k)


def test_scale_fractional_half_carton():
    x = scale_by_fraction(Flavor.DIRTY_UBE, 0.5)
    assert x.ube_tbsp == pytest.approx(0.75)
    assert x.total_oz == pytest.approx(83)


def test_scale_by_cartons_floors_fractions():
    assert scale_by_cartons(Flavor.TIKI_CHATA, 2.9).k == 2


@pytest.mark.parametrize("bad", [-3, None, "abc", float("nan")])
def test_scale_normalizes_bad_factor_to_zero(bad):
    for scale in (scale_by_cartons, scale_by_fraction):
        x = scale(Flavor.DIRTY_UBE, bad)
        assert x.k == 0
        assert x.total_oz == 0
        assert x.ube_tbsp == 0


def test_total_excludes_ube_concentrate():
    x = scale_by_fraction(Flavor.DIRTY_UBE, 1.25)
    assert x.total_oz == x.coconut + x.horchata + x.coffee + x.water


def test_reference_batches_cover_both_flavors():
    ref = reference_batches(3)
    assert set(ref) == set(Flavor)
    assert ref[Flavor.TIKI_CHATA].total_oz == ref[Flavor.DIRTY_UBE].total_oz == 498
    assert ref[Flavor.DIRTY_UBE].ube_tbsp == pytest.approx(4.5)


def test_bases_tiki_one_carton():
    b = bases(scale_by_cartons(Flavor.TIKI_CHATA, 1))
    assert (b.horchata_base_oz, b.cold_brew_base_oz, b.total_mix_oz) == (48, 118, 166)


def test_bases_sum_to_total_mix():
    b = bases(scale_by_fraction(Flavor.DIRTY_UBE, 0.37))
    assert b.horchata_base_oz + b.cold_brew_base_oz == pytest.approx(b.total_mix_oz)


def test_pack_one_carton():
    y = pack(166, 12)
    assert y.full_bottles == 13
    assert y.remainder_oz == 10


def test_top_off():
    t = top_off(22, 12)
    assert t.extra_bottles == 1
    assert t.leftover_oz == pytest.approx(10)


@pytest.mark.parametrize("size", [0, -5, None])
def test_bottle_size_floors_at_one(size):
    assert clamp_bottle_size(size) == 1
    assert pack(5.5, size).full_bottles == 5


@pytest.mark.parametrize("volume", [-5, -1, -0.5])
def test_negative_volume_packs_to_nothing(volume):
    assert pack(volume, 12) == YieldResult(0, 0)
    assert top_off(volume, 12) == TopOff(0, 0)


def test_capacity_one_carton():
    assert capacity_bottles(1, 12) == 13
    assert TOTAL_PER_CARTON_OZ % 12 == 10


def test_unit_conversions():
    assert to_qt(64) == 2
    assert to_ml(1) == pytest.approx(29.5735)


def test_round2_half_away_from_zero():
    assert round2(1.005) == 1.01
    assert round2(2.675) == 2.68
    assert round2(-1.005) == -1.01
    assert round2(3.14159) == 3.14


def test_round2_handles_very_large_values():
    assert round2(1e27) == 1e27
    assert round2(-1e30) == -1e30


def test_format_very_large_values():
    assert format_number(1e27) == "1,000,000,000,000,000,000,000,000,000"
    t = unit_triplet(166e26)
    assert t.startswith("16,600,000,000,000,000,000,000,000,000 fl oz")
    assert t.endswith(" mL")


def test_format_number_suppresses_trailing_zeros():
    assert format_number(12) == "12"
    assert format_number(0.5) == "0.5"
    assert format_number(4909.2011) == "4,909.2"
    assert format_number(4909.2011, "it_IT") == "4.909,2"


def test_unit_triplet():
    assert unit_triplet(166) == "166 fl oz · 5.19 qt · 4,909.2 mL"


def test_direct_split_basic():
    p = plan_direct_split(3, 1, 12)
    assert p.lead_flavor is Flavor.DIRTY_UBE
    assert (p.lead_cartons, p.other_cartons) == (1, 2)
    assert p.lead_scaled.ube_tbsp == pytest.approx(1.5)
    assert p.other_scaled.ube_tbsp == 0
    # 166 -> 13 + 10 oz, 332 -> 27 + 8 oz
    assert p.total_full_bottles == 40
    assert p.combined_remainder_oz == pytest.approx(18)
    assert p.top_off.extra_bottles == 1
    assert p.top_off.leftover_oz == pytest.approx(6)


@pytest.mark.parametrize("total,lead", [(0, 0), (3, 0), (3, 3), (3, 9), (2, -4), (5, 2.7)])
def test_direct_split_conserves_cartons(total, lead):
    p = plan_direct_split(total, lead, 12)
    assert 0 <= p.lead_cartons <= p.total_cartons
    assert p.lead_cartons + p.other_cartons == p.total_cartons


def test_direct_split_after_total_shrinks():
    p = plan_direct_split(5, 4, 12)
    assert (p.lead_cartons, p.other_cartons) == (4, 1)
    p = plan_direct_split(2, p.lead_cartons, 12)
    assert (p.lead_cartons, p.other_cartons) == (2, 0)


def test_direct_split_batch_lookup():
    p = plan_direct_split(4, 1, 16, lead_flavor="tikiChata")
    assert p.other_flavor is Flavor.DIRTY_UBE
    assert p.batch_for(Flavor.DIRTY_UBE).k == 3
    assert p.yield_for("tikiChata") == pack(166, 16)


def test_bottle_split_ube_one():
    p = plan_by_bottles(1, 12, Flavor.DIRTY_UBE, 1)
    assert p.capacity_bottles == 13
    assert (p.lead_bottles, p.other_bottles) == (1, 12)
    assert p.remainder_oz == pytest.approx(10)
    assert p.lead_scaled.total_oz + p.other_scaled.total_oz == pytest.approx(156)
    assert p.lead_scaled.ube_tbsp == pytest.approx(1.5 * 12 / 166)


def test_bottle_split_clamps_lead_request():
    p = plan_by_bottles(1, 12, Flavor.TIKI_CHATA, 99)
    assert p.lead_bottles == 13
    assert p.other_bottles == 0
    assert p.other_flavor is Flavor.DIRTY_UBE


def test_bottle_split_zero_cartons():
    p = plan_by_bottles(0, 12, Flavor.DIRTY_UBE, 5)
    assert p.capacity_bottles == 0
    assert (p.lead_bottles, p.other_bottles) == (0, 0)
    assert p.remainder_oz == 0
    assert p.lead_scaled.total_oz == p.other_scaled.total_oz == 0


@pytest.mark.parametrize("cartons", [0, 1, 2.5, 7])
@pytest.mark.parametrize("size", [1, 10, 12, 16.5])
@pytest.mark.parametrize("request_", [0, 3, 40, 10_000, -2])
def test_bottle_split_conserves_capacity(cartons, size, request_):
    p = plan_by_bottles(cartons, size, Flavor.DIRTY_UBE, request_)
    assert p.planned_bottles == capacity_bottles(cartons, size)
    assert 0 <= p.remainder_oz < size


def test_bottle_split_is_lead_relative():
    ube_lead = plan_by_bottles(2, 12, Flavor.DIRTY_UBE, 5)
    tiki_lead = plan_by_bottles(2, 12, Flavor.TIKI_CHATA, 5)
    assert {ube_lead.lead_bottles, ube_lead.other_bottles} == {tiki_lead.lead_bottles, tiki_lead.other_bottles}
    # same request, other flavor leading: the ube side changes from 5 to 22
    assert ube_lead.lead_scaled.ube_tbsp != tiki_lead.other_scaled.ube_tbsp


def test_clamp_controls_reclamps_after_upstream_change():
    c = clamp_controls(Controls(cartons=1, bottle_size=12, ube_cartons=3, lead_bottles=20))
    assert c.ube_cartons == 1
    assert c.lead_bottles == 13
    c = clamp_controls(Controls(cartons=1, bottle_size=16, lead_bottles=13))
    assert c.lead_bottles == 10


def test_clamp_controls_normalizes_bad_values():
    c = clamp_controls(Controls(cartons=-2, bottle_size=0, mode="nope", lead_flavor="mango", lead_bottles=4))
    assert c.cartons == 0
    assert c.bottle_size == 1
    assert c.mode == "cartons"
    assert c.lead_flavor is Flavor.DIRTY_UBE
    assert c.lead_bottles == 0


def test_recompute_is_idempotent():
    controls = Controls(cartons=3, bottle_size=10, mode="bottles", ube_cartons=2,
                        lead_flavor=Flavor.TIKI_CHATA, lead_bottles=17)
    assert recompute(controls) == recompute(controls)


def test_recompute_uses_clamped_controls():
    snap = recompute(Controls(cartons=2, bottle_size=12, ube_cartons=5, lead_bottles=99))
    assert snap.controls.ube_cartons == 2
    assert snap.direct.lead_cartons == 2
    assert snap.by_bottles.lead_bottles == 27
    assert snap.reference_yield == pack(332, 12)
    assert snap.reference_bases.total_mix_oz == 332
