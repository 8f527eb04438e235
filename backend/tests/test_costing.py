"""Tests for the box cost estimator.

Tests cover:
- Sheet counts and material cost per box type
- Lamination, print, cliché, finishing and labour lines
- Overhead, volume discount and the total identity
- Clamping of malformed input and fallback for unknown options
- Non-finite and oversized numbers never raise and give finite totals
"""

import dataclasses
import math

import pytest

from boxquote.services.costing import (
    MAX_QUANTITY,
    CostInputs,
    Finishing,
    LogoPlacement,
    cliche_rows,
    estimate_cost,
    estimate_price,
    logos_area_m2,
)
from boxquote.services.layout import MAX_DIMENSION_MM
from boxquote.services.rates import CLICHE_CM2_RATE

# base wrap 440x350 + lid wrap 366x276 for the 250x80x160 lid-and-base box
LID_BOTTOM_OUTER_M2 = (440 * 350 + 366 * 276) / 1e6


def _replace(inputs: CostInputs, **changes) -> CostInputs:
    return dataclasses.replace(inputs, **changes)


def _assert_total_identity(b):
    parts = (b.material_cost + b.lamination_cost + b.print_cost + b.finishing_cost
             + b.work_cost + b.overhead - b.discount)
    assert abs(b.total - parts) <= 1e-9
    assert b.per_unit == b.total / b.quantity


# =============================================================================
# Lid and base
# =============================================================================


class TestLidBottom:
    def test_designer_paper_scenario(self, lid_bottom_inputs):
        b = estimate_cost(lid_bottom_inputs)

        assert b.sheets == {"board": 42, "wrap": 67, "inner": 0}
        # boards 42 x 115, wraps (25 + 25) x 135, lid lining 17 x 135
        assert b.material_cost == pytest.approx(13875.0)
        assert b.lamination_cost == 0
        assert b.cliche_cost == 0
        assert b.print_cost == 0
        assert b.finishing_cost == 0
        assert b.work_cost == pytest.approx(100 * 100 + 900)
        assert b.discount == 0
        assert b.overhead == pytest.approx(24775.0 * 0.18)
        assert b.total == pytest.approx(29234.5)
        assert b.per_unit == pytest.approx(292.345)
        assert b.area_m2 == pytest.approx(109 * 0.7 / 100)
        _assert_total_identity(b)

    def test_parts_report_used_flags(self, lid_bottom_inputs):
        parts = {p.name: p for p in estimate_cost(lid_bottom_inputs).parts}
        assert parts["lid_board"].per_sheet == 6
        assert parts["lid_board"].sheets == 17
        assert parts["base_inner"].used is False
        assert parts["lid_inner"].used is True

    def test_inner_bottom_uses_inner_paper_price(self, lid_bottom_inputs):
        plain = estimate_cost(lid_bottom_inputs)
        lined = estimate_cost(_replace(lid_bottom_inputs, inner_mode="bottom", inner_paper="offset_150"))
        assert lined.sheets["inner"] == 25
        # lid lining (17) and base lining (25) both switch to offset at 118
        expected = plain.material_cost - 17 * 135 + 17 * 118 + 25 * 118
        assert lined.material_cost == pytest.approx(expected)

    def test_long_lid_defaults_to_box_height(self, lid_bottom_inputs):
        long_lid = estimate_cost(_replace(lid_bottom_inputs, lid_long=True))
        explicit = estimate_cost(_replace(lid_bottom_inputs, lid_height_mm=80))
        assert long_lid.to_dict() == explicit.to_dict()

    def test_explicit_lid_height_beats_long_flag(self, lid_bottom_inputs):
        a = estimate_cost(_replace(lid_bottom_inputs, lid_long=True, lid_height_mm=40))
        b = estimate_cost(lid_bottom_inputs)
        assert a.to_dict() == b.to_dict()


# =============================================================================
# Other box types
# =============================================================================


class TestCasket:
    def test_sheets_and_material(self):
        b = estimate_cost(CostInputs("casket", 200, 50, 150, 1, inner_paper="offset_150"))
        assert b.sheets == {"board": 2, "wrap": 3, "inner": 0}
        # two boards, two wraps at designer price, lid lining at offset price
        assert b.material_cost == pytest.approx(2 * 115 + 2 * 135 + 118)

    def test_inner_bottom_counted(self):
        b = estimate_cost(CostInputs("casket", 200, 50, 150, 1, inner_mode="bottom"))
        assert b.sheets["inner"] == 1

    def test_uses_wrap_lamination(self):
        base = CostInputs("casket", 200, 50, 150, 10, wrap_paper="coated_150",
                          lamination="gloss", wrap_lamination="none")
        outer_m2 = (550 * 90 + 240 * 455) / 1e6
        assert estimate_cost(base).lamination_cost == pytest.approx(18 * outer_m2 * 10)
        glossy = estimate_cost(_replace(base, wrap_lamination="gloss"))
        assert glossy.lamination_cost == pytest.approx(15 * outer_m2 * 10)


class TestDrawer:
    def test_inner_breakdown(self):
        inputs = CostInputs("drawer", 100, 50, 200, 10, inner_mode="bottom", drawer_sleeve_inner=True)
        b = estimate_cost(inputs)
        assert b.sheets_breakdown["tray_inner_sheets"] > 0
        assert b.sheets_breakdown["sleeve_inner_sheets"] > 0
        assert b.sheets["inner"] == (b.sheets_breakdown["tray_inner_sheets"]
                                     + b.sheets_breakdown["sleeve_inner_sheets"])

    def test_no_lining_by_default(self):
        b = estimate_cost(CostInputs("drawer", 100, 50, 200, 10))
        assert b.sheets["inner"] == 0
        assert b.sheets_breakdown == {"tray_inner_sheets": 0, "sleeve_inner_sheets": 0}

    def test_sleeve_paper_prices_sleeve_lining(self):
        base = CostInputs("drawer", 100, 50, 200, 10, drawer_sleeve_inner=True)
        own_paper = estimate_cost(_replace(base, drawer_sleeve_paper="offset_150"))
        wrap_paper = estimate_cost(base)
        sleeve_sheets = wrap_paper.sheets_breakdown["sleeve_inner_sheets"]
        assert wrap_paper.material_cost - own_paper.material_cost == pytest.approx(sleeve_sheets * (135 - 118))


class TestFallback:
    def test_hex_uses_surface_area(self):
        b = estimate_cost(CostInputs("hex", 100, 100, 100, 10))
        # 0.06 m2 surface: ceil(0.6 / 0.7) boards, ceil(0.3 / 0.7) wraps
        assert b.sheets == {"board": 1, "wrap": 1, "inner": 0}
        assert b.material_cost == pytest.approx(115 + 135)
        assert b.parts == []

    def test_unknown_type_matches_hex(self):
        hexagon = estimate_cost(CostInputs("hex", 120, 60, 90, 30, print_mode="fullWrap"))
        other = estimate_cost(CostInputs("pyramid", 120, 60, 90, 30, print_mode="fullWrap"))
        assert other.total == hexagon.total


# =============================================================================
# Process costs
# =============================================================================


class TestLamination:
    @pytest.mark.parametrize("lam", ["none", "matt", "gloss"])
    def test_designer_paper_never_laminated(self, lid_bottom_inputs, lam):
        b = estimate_cost(_replace(lid_bottom_inputs, lamination=lam, wrap_paper="designer_120"))
        assert b.lamination_cost == 0

    def test_required_lamination_defaults_to_matt(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, wrap_paper="offset_150", lamination="none"))
        assert b.lamination_cost == pytest.approx(18 * LID_BOTTOM_OUTER_M2 * 100)

    def test_gloss_rate(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, wrap_paper="coated_150", lamination="gloss"))
        assert b.lamination_cost == pytest.approx(15 * LID_BOTTOM_OUTER_M2 * 100)


class TestPrint:
    def test_full_wrap_scales_with_quantity(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, print_mode="fullWrap"))
        assert b.print_cost == pytest.approx(125 * LID_BOTTOM_OUTER_M2 * 100)

    def test_logos_only_is_not_multiplied_by_quantity(self, lid_bottom_inputs):
        logos = (LogoPlacement("top", 100, 100),)
        small = estimate_cost(_replace(lid_bottom_inputs, logos_meta=logos, quantity=10))
        large = estimate_cost(_replace(lid_bottom_inputs, logos_meta=logos, quantity=1000))
        assert small.print_cost == pytest.approx(38 * 0.01)
        assert large.print_cost == small.print_cost


class TestCliche:
    def test_single_logo_blind_emboss(self, lid_bottom_inputs):
        inputs = _replace(
            lid_bottom_inputs,
            logos_meta=(LogoPlacement("top", 90, 60),),
            finishing=Finishing(blind_emboss=True),
        )
        b = estimate_cost(inputs)
        assert CLICHE_CM2_RATE == 59
        assert b.cliche_cost == 54 * 59 * 1 == 3186
        assert b.cliche == {"total_area_cm2": 54, "processes": 1}
        row = b.cliche_breakdown[0]
        assert (row.index, row.side, row.w_mm, row.h_mm, row.area_cm2, row.cost) == (1, "top", 90, 60, 54.0, 3186)

    def test_two_processes_double_cost_and_add_stamping_work(self, lid_bottom_inputs):
        logos = (LogoPlacement("top", 90, 60),)
        one = estimate_cost(_replace(lid_bottom_inputs, logos_meta=logos, finishing=Finishing(foil_stamp=True)))
        two = estimate_cost(_replace(lid_bottom_inputs, logos_meta=logos,
                                     finishing=Finishing(blind_emboss=True, foil_stamp=True)))
        assert two.cliche_cost == 2 * one.cliche_cost
        assert two.work_cost - one.work_cost == pytest.approx(10 * 100)

    def test_no_cliche_without_stamping(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, logos_meta=(LogoPlacement("top", 90, 60),)))
        assert b.cliche_cost == 0
        assert b.cliche_breakdown == []

    def test_cliche_is_not_part_of_total(self, lid_bottom_inputs):
        logos = (LogoPlacement("top", 90, 60),)
        b = estimate_cost(_replace(lid_bottom_inputs, logos_meta=logos, finishing=Finishing(blind_emboss=True)))
        _assert_total_identity(b)

    def test_rows_round_half_up(self):
        rows = cliche_rows([LogoPlacement("left", 10.5, 10)], 1)
        assert rows[0].w_mm == 11
        assert rows[0].area_cm2 == 1.1
        assert rows[0].cost == math.floor(1.05 * 59 + 0.5)


class TestFinishing:
    def test_spot_uv_on_logos(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, logos_meta=(LogoPlacement("top", 100, 100),),
                                   finishing=Finishing(spot_uv=True)))
        assert b.finishing_cost == pytest.approx(48 * 0.01 * 100)

    def test_spot_uv_without_logos_uses_wrap_area(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, finishing=Finishing(spot_uv=True)))
        assert b.finishing_cost == pytest.approx(48 * LID_BOTTOM_OUTER_M2 * 100)

    def test_magnets(self, lid_bottom_inputs):
        b = estimate_cost(_replace(lid_bottom_inputs, finishing=Finishing(magnets_pair=True)))
        assert b.finishing_cost == pytest.approx(9.5 * 100)


# =============================================================================
# Totals and robustness
# =============================================================================


class TestTotals:
    @pytest.mark.parametrize("qty,factor", [(499, 0.0), (500, 0.025), (1500, 0.04), (3000, 0.06), (5000, 0.10)])
    def test_discount_tiers(self, lid_bottom_inputs, qty, factor):
        b = estimate_cost(_replace(lid_bottom_inputs, quantity=qty))
        subtotal = b.material_cost + b.lamination_cost + b.print_cost + b.finishing_cost + b.work_cost
        assert b.discount == pytest.approx(subtotal * factor)
        _assert_total_identity(b)

    @pytest.mark.parametrize("box_type", ["casket", "lidBottom", "drawer", "hex"])
    def test_identity_and_determinism_for_every_type(self, box_type):
        inputs = CostInputs(
            box_type, 180, 70, 120, 750,
            wrap_paper="coated_150", print_mode="fullWrap", inner_mode="bottom",
            drawer_sleeve_inner=True,
            finishing=Finishing(blind_emboss=True, spot_uv=True, magnets_pair=True),
            logos_meta=(LogoPlacement("top", 40, 30), LogoPlacement("front", 20, 20)),
        )
        first = estimate_cost(inputs)
        second = estimate_cost(inputs)
        assert first.to_dict() == second.to_dict()
        _assert_total_identity(first)
        assert all(isinstance(n, int) and n >= 0 for n in first.sheets.values())

    def test_alias(self, lid_bottom_inputs):
        assert estimate_price is estimate_cost

    def test_currency_is_echoed(self, lid_bottom_inputs):
        assert estimate_cost(lid_bottom_inputs).currency == "₽"
        assert estimate_cost(_replace(lid_bottom_inputs, currency="EUR")).currency == "EUR"


class TestCoercion:
    @pytest.mark.parametrize("bad", [0, -10, float("nan"), None, "abc"])
    def test_bad_dimensions_clamp_to_one(self, bad):
        clamped = estimate_cost(CostInputs("lidBottom", bad, 80, 160, 10))
        explicit = estimate_cost(CostInputs("lidBottom", 1, 80, 160, 10))
        assert clamped.total == explicit.total

    @pytest.mark.parametrize("bad,expected", [(0, 1), (-5, 1), (float("nan"), 1), (2.7, 2)])
    def test_quantity_is_floored_and_clamped(self, bad, expected):
        assert estimate_cost(CostInputs("lidBottom", 250, 80, 160, bad)).quantity == expected

    def test_unknown_wrap_paper_behaves_as_designer(self, lid_bottom_inputs):
        unknown = estimate_cost(_replace(lid_bottom_inputs, wrap_paper="kraft", lamination="gloss"))
        designer = estimate_cost(lid_bottom_inputs)
        assert unknown.total == designer.total
        assert unknown.lamination_cost == 0

    def test_unknown_print_mode_behaves_as_logos_only(self, lid_bottom_inputs):
        logos = (LogoPlacement("top", 50, 50),)
        a = estimate_cost(_replace(lid_bottom_inputs, print_mode="spray", logos_meta=logos))
        b = estimate_cost(_replace(lid_bottom_inputs, logos_meta=logos))
        assert a.print_cost == b.print_cost

    def test_negative_logo_size_has_no_area(self):
        assert logos_area_m2([LogoPlacement("top", -10, 50)]) == 0

    def test_nan_logo_size_has_no_area(self):
        assert logos_area_m2([LogoPlacement("top", float("nan"), 50)]) == 0

    def test_nan_logo_with_stamping(self, lid_bottom_inputs):
        inputs = _replace(
            lid_bottom_inputs,
            logos_meta=(LogoPlacement("top", float("nan"), 60),),
            finishing=Finishing(blind_emboss=True),
        )
        b = estimate_cost(inputs)
        row = b.cliche_breakdown[0]
        assert (row.w_mm, row.h_mm, row.area_cm2, row.cost) == (0, 60, 0, 0)
        assert b.cliche_cost == 0

    def test_huge_fallback_box_is_capped(self):
        b = estimate_cost(CostInputs("hex", 1e200, 1e200, 100, 10))
        capped = estimate_cost(CostInputs("hex", MAX_DIMENSION_MM, MAX_DIMENSION_MM, 100, 10))
        assert b.sheets == capped.sheets
        assert math.isfinite(b.total)

    def test_quantity_is_capped(self):
        assert estimate_cost(CostInputs("lidBottom", 250, 80, 160, 1e300)).quantity == MAX_QUANTITY


# =============================================================================
# Never raises
# =============================================================================

BAD_NUMBERS = [float("nan"), float("inf"), float("-inf"), 1e200]


def _assert_finite(b):
    for value in (b.material_cost, b.lamination_cost, b.print_cost, b.cliche_cost,
                  b.finishing_cost, b.work_cost, b.overhead, b.discount,
                  b.total, b.per_unit, b.area_m2):
        assert math.isfinite(value)
    parts = (b.material_cost + b.lamination_cost + b.print_cost + b.finishing_cost
             + b.work_cost + b.overhead - b.discount)
    assert b.total == pytest.approx(parts, rel=1e-9)


def _stamped(box_type, **changes) -> CostInputs:
    inputs = CostInputs(
        box_type, 250, 80, 160, 100,
        wrap_paper="coated_150",
        lamination="gloss",
        wrap_lamination="gloss",
        finishing=Finishing(blind_emboss=True, foil_stamp=True, spot_uv=True, magnets_pair=True),
        logos_meta=(LogoPlacement("top", 90, 60),),
    )
    return _replace(inputs, **changes)


@pytest.mark.parametrize("box_type", ["casket", "lidBottom", "drawer", "hex"])
@pytest.mark.parametrize("bad", BAD_NUMBERS)
class TestNeverRaises:
    @pytest.mark.parametrize("field", ["width_mm", "height_mm", "depth_mm", "quantity"])
    def test_bad_box_number(self, box_type, bad, field):
        _assert_finite(estimate_cost(_stamped(box_type, **{field: bad})))

    def test_bad_logo_size(self, box_type, bad):
        logos = (LogoPlacement("top", bad, 60), LogoPlacement("side", 40, bad))
        b = estimate_cost(_stamped(box_type, logos_meta=logos))
        _assert_finite(b)
        assert len(b.cliche_breakdown) == 2

    @pytest.mark.parametrize("field", ["lid_height_mm", "lid_clearance_mm"])
    def test_bad_lid_geometry(self, box_type, bad, field):
        _assert_finite(estimate_cost(_stamped(box_type, **{field: bad})))

    def test_full_wrap(self, box_type, bad):
        b = estimate_cost(_stamped(box_type, width_mm=bad, quantity=bad, print_mode="fullWrap"))
        _assert_finite(b)
