# app.py
# =============================================================================
# Cold Brew Bottle Planner: carton scaling + split production planner
# =============================================================================

import streamlit as st
import matplotlib.pyplot as plt  # bases pie chart

from brew_calc import (
    BOTTLE_PRESETS,
    CARTON_PRESETS,
    SPLIT_MODES,
    Controls,
    Flavor,
    bases,
    clamp_controls,
    format_number,
    pack,
    recompute,
    unit_triplet,
)
from logging_conf import configure_logging
from selfcheck import run_checks
from settings import Settings

# -----------------------------------------------------------------------------
# CONFIG
# -----------------------------------------------------------------------------
st.set_page_config(page_title="Cold Brew Bottle Planner", layout="wide")

SETTINGS = Settings.from_env()
configure_logging(SETTINGS.log_level)

LOCALES = ["en_US", "it_IT"]
if SETTINGS.locale not in LOCALES:
    LOCALES.insert(0, SETTINGS.locale)

MODE_LABELS = {"cartons": "By Cartons", "bottles": "By Bottles"}

# -----------------------------------------------------------------------------
# SESSION DEFAULTS
# -----------------------------------------------------------------------------
if "cartons" not in st.session_state:
    st.session_state.cartons = SETTINGS.default_cartons
if "bottle_size" not in st.session_state:
    st.session_state.bottle_size = float(SETTINGS.default_bottle_oz)
if "split_mode" not in st.session_state:
    st.session_state.split_mode = SPLIT_MODES[0]
if "ube_cartons" not in st.session_state:
    st.session_state.ube_cartons = 0
if "lead_flavor" not in st.session_state:
    st.session_state.lead_flavor = Flavor.DIRTY_UBE.value
if "lead_bottles" not in st.session_state:
    st.session_state.lead_bottles = 0
if "locale" not in st.session_state:
    st.session_state["locale"] = SETTINGS.locale

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------
def fmt(x) -> str:
    """Format a number following the current locale."""
    return format_number(x, st.session_state.get("locale", "en_US"))


def triplet(oz) -> str:
    return unit_triplet(oz, st.session_state.get("locale", "en_US"))


def _set_cartons(n: int):
    st.session_state.cartons = n


def _set_bottle_size(n: float):
    st.session_state.bottle_size = float(n)


def flavor_card(flavor: Flavor, headline: str, batch, bottle_size: float, y=None):
    """One flavor's volumes, bottles, ingredients and bases."""
    if y is None:
        y = pack(batch.total_oz, bottle_size)
    b = bases(batch)
    with st.container(border=True):
        st.markdown(f"**{headline}**")
        m1, m2, m3 = st.columns(3)
        m1.metric("Total volume", f"{fmt(batch.total_oz)} fl oz")
        m2.metric("Full bottles 🍾", f"{y.full_bottles} × {fmt(bottle_size)} fl oz")
        m3.metric("Remainder", f"{fmt(y.remainder_oz)} fl oz")
        if flavor is Flavor.DIRTY_UBE:
            st.caption(f"Ube concentrate: {fmt(batch.ube_tbsp)} tbsp")

        st.markdown("###### Scaled ingredients")
        st.write(f"- Coconut milk: {fmt(batch.coconut)} fl oz")
        st.write(f"- Horchata mix: {fmt(batch.horchata)} fl oz")
        st.write(f"- Coffee concentrate: {fmt(batch.coffee)} fl oz")
        st.write(f"- Water: {fmt(batch.water)} fl oz")
        if flavor is Flavor.DIRTY_UBE:
            st.write(f"- Ube concentrate: {fmt(batch.ube_tbsp)} tbsp")

        st.text(f"Horchata base:         {triplet(b.horchata_base_oz)}")
        st.text(f"Cold brew base:        {triplet(b.cold_brew_base_oz)}")
        st.text(f"Horchata + cold brew:  {triplet(b.total_mix_oz)}")


# -----------------------------------------------------------------------------
# UI: sidebar
# -----------------------------------------------------------------------------
st.sidebar.subheader("Locale")
loc = st.sidebar.selectbox("Number format", LOCALES, index=LOCALES.index(SETTINGS.locale), key="settings_locale")
st.session_state["locale"] = loc

# -----------------------------------------------------------------------------
# INPUTS
# -----------------------------------------------------------------------------
st.header("Flavored Cold Brew Bottle Calculator")
st.caption("Scale linearly by 32 fl oz coconut milk cartons. Bottle default: 12 fl oz.")

colA, colB = st.columns(2)
with colA:
    st.number_input("Coconut milk cartons (32 fl oz each)", min_value=0, step=1, key="cartons")
    pc = st.columns(len(CARTON_PRESETS))
    for col, n in zip(pc, CARTON_PRESETS):
        col.button(str(n), key=f"preset_cartons_{n}", on_click=_set_cartons, args=(n,))
    st.caption("Each carton = 32 fl oz. Recipes scale linearly by carton count.")
with colB:
    st.number_input("Bottle size (fl oz)", min_value=1.0, step=0.5, key="bottle_size")
    pb = st.columns(len(BOTTLE_PRESETS))
    for col, n in zip(pb, BOTTLE_PRESETS):
        col.button(str(n), key=f"preset_bottle_{n}", on_click=_set_bottle_size, args=(n,))
    st.caption("Default 12 fl oz bottles. Change if you use a different size.")

st.divider()
st.subheader("Split Production Planner")
mode = st.radio("Mode", SPLIT_MODES, format_func=MODE_LABELS.get, horizontal=True, key="split_mode")

# Re-clamp dependent controls before their widgets exist in this run
controls = clamp_controls(
    Controls(
        cartons=st.session_state.cartons,
        bottle_size=st.session_state.bottle_size,
        mode=mode,
        ube_cartons=st.session_state.ube_cartons,
        lead_flavor=st.session_state.lead_flavor,
        lead_bottles=st.session_state.lead_bottles,
    )
)
st.session_state.ube_cartons = controls.ube_cartons
st.session_state.lead_flavor = controls.lead_flavor.value
st.session_state.lead_bottles = controls.lead_bottles

snap = recompute(controls)
cartons = controls.cartons
size = controls.bottle_size

if mode == "cartons":
    direct = snap.direct
    st.caption(
        f"Allocate your {cartons} carton(s) between Dirty Ube and Tiki Chata. "
        "The input sets Dirty Ube; Tiki gets the rest."
    )
    st.number_input(
        "Dirty Ube cartons", min_value=0, max_value=cartons, step=1, key="ube_cartons"
    )
    st.caption(f"Tiki Chata: {direct.other_cartons} carton(s)")

    c1, c2 = st.columns(2)
    with c1:
        flavor_card(Flavor.DIRTY_UBE, f"Dirty Ube — {direct.lead_cartons} carton(s)", direct.lead_scaled, size)
    with c2:
        flavor_card(Flavor.TIKI_CHATA, f"Tiki Chata — {direct.other_cartons} carton(s)", direct.other_scaled, size)

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Total full bottles", f"{direct.total_full_bottles:d}")
    m2.metric("Combined remainder", f"{fmt(direct.combined_remainder_oz)} fl oz")
    m3.metric("Extra bottles from remainders", f"{direct.top_off.extra_bottles:d}")
    m4.metric("Leftover after extra bottles", f"{fmt(direct.top_off.leftover_oz)} fl oz")
else:
    plan = snap.by_bottles
    st.caption(
        "Set a target for one flavor (lead). The other flavor automatically uses "
        f"all remaining capacity from your {cartons} carton(s)."
    )
    l1, l2 = st.columns(2)
    l1.radio(
        "Lead flavor",
        [f.value for f in (Flavor.DIRTY_UBE, Flavor.TIKI_CHATA)],
        format_func=lambda v: Flavor(v).label,
        horizontal=True,
        key="lead_flavor",
    )
    l2.number_input(
        "Lead # of bottles",
        min_value=0,
        max_value=plan.capacity_bottles,
        step=1,
        key="lead_bottles",
    )
    st.caption(
        f"Bottle size: {fmt(size)} fl oz. Capacity: {plan.capacity_bottles} bottles total, "
        f"remainder after plan: {fmt(plan.remainder_oz)} fl oz"
    )

    c1, c2 = st.columns(2)
    with c1:
        flavor_card(plan.lead_flavor, f"{plan.lead_flavor.label} — {plan.lead_bottles} bottle(s)", plan.lead_scaled, size)
    with c2:
        flavor_card(plan.other_flavor, f"{plan.other_flavor.label} — {plan.other_bottles} bottle(s)", plan.other_scaled, size)

    m1, m2 = st.columns(2)
    m1.metric("Planned full bottles", f"{plan.planned_bottles:d}")
    m2.metric("Unused", f"{fmt(plan.remainder_oz)} fl oz")

# -----------------------------------------------------------------------------
# FULL-BATCH REFERENCE (all cartons one flavor)
# -----------------------------------------------------------------------------
st.divider()
st.subheader(f"Full batch reference — all {cartons} carton(s)")
r1, r2 = st.columns(2)
with r1:
    flavor_card(Flavor.DIRTY_UBE, f"Dirty Ube (all {cartons} carton)", snap.reference[Flavor.DIRTY_UBE], size, snap.reference_yield)
with r2:
    flavor_card(Flavor.TIKI_CHATA, f"Tiki Chata (all {cartons} carton)", snap.reference[Flavor.TIKI_CHATA], size, snap.reference_yield)

rb = snap.reference_bases
if rb.total_mix_oz > 0:
    fig, ax = plt.subplots()
    ax.pie(
        [rb.horchata_base_oz, rb.cold_brew_base_oz],
        labels=["Horchata base", "Cold brew base"],
        autopct='%1.1f%%',
        startangle=90,
    )
    ax.axis('equal')
    st.pyplot(fig)
    plt.close(fig)
    st.caption("Pie chart of the two pre-mix bases in the full batch")
else:
    st.info("Add at least one carton to see the bases breakdown pie chart.")

# -----------------------------------------------------------------------------
# SELF-CHECKS
# -----------------------------------------------------------------------------
st.divider()
st.markdown("#### Self-checks 🧪")
for r in run_checks():
    if r.ok:
        st.success(f"PASS — {r.name}")
    else:
        st.error(f"FAIL — {r.name}: {r.message}")
