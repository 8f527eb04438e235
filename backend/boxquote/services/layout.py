"""Flat-pattern sizes and sheet nesting for the supported box types.

Every part of a box is cut as a rectangle from a fixed 1000x700 mm stock
sheet. The functions here turn box dimensions (W, H, D in mm) into the
rectangles each part needs and count how many sheets a print run uses.
"""
import math
from dataclasses import dataclass
from typing import Dict

SHEET_W_MM = 1000.0
SHEET_H_MM = 700.0

# Casket wrap allowances
GAP_MM = 4.0
TURN_MM = 30.0
RESERVE_MM = 4.0

# Lid & base / drawer tray allowances, added to the core size
DIECUT_ADD_MM = 10.0
OUTER_ADD_MM = 30.0
INNER_SUB_MM = 5.0

# Drawer sleeve allowances, added to the sleeve core size
SLEEVE_DIECUT_ADD_MM = 20.0
SLEEVE_OUTER_ADD_MM = 80.0
SLEEVE_INNER_ADD_MM = 10.0

LID_CLEARANCE_MM_DEFAULT = 6.0
LID_HEIGHT_MM_DEFAULT = 40.0

# Upper bound for any length fed to the layouts, keeps areas finite
MAX_DIMENSION_MM = 100_000.0

# Share of the box surface assumed to be wrapped for unknown box types
FALLBACK_WRAP_FRACTION = 0.5


@dataclass(frozen=True)
class Rect:
    w: float
    h: float

    @property
    def area_m2(self) -> float:
        return mm2_to_m2(self.w, self.h)


@dataclass(frozen=True)
class Packing:
    per_sheet: int
    sheets: int


def mm2_to_m2(w: float, h: float) -> float:
    return (w * h) / 1e6


def sheet_area_m2() -> float:
    return mm2_to_m2(SHEET_W_MM, SHEET_H_MM)


def pack_on_sheet(rect_w: float, rect_h: float, qty: int,
                  sheet_w: float = SHEET_W_MM, sheet_h: float = SHEET_H_MM) -> Packing:
    """Count identical rectangles per sheet and sheets needed for ``qty`` pieces.

    Straight grid fit in both orientations (as cut on a guillotine), keeping the
    better one. This is an approximation of the print shop's layout, not an
    optimal bin packing: mixed orientations on one sheet are never tried.

    A rectangle that does not fit at all gives ``per_sheet == 0`` and one sheet
    per piece, which marks the part as oversized.
    """
    def fit(w: float, h: float) -> int:
        if w <= 0 or h <= 0:
            return 0
        return max(0, math.floor(sheet_w / w)) * max(0, math.floor(sheet_h / h))

    per_sheet = max(fit(rect_w, rect_h), fit(rect_h, rect_w))
    sheets = math.ceil(qty / per_sheet) if per_sheet > 0 else qty
    return Packing(per_sheet=per_sheet, sheets=sheets)


def casket_layouts(W: float, H: float, D: float) -> Dict[str, Rect]:
    """Hinged casket: body, lid board strip, wraps and linings."""
    lid_master_h = H + (H + 2) + (D + 2) + (D + 5)
    return {
        "body_board": Rect(W + 2 * H, D + 2 * H),
        "lid_board": Rect(W + 10, lid_master_h),
        "body_wrap": Rect(W + 2 * D + 50, H + 40),
        "lid_wrap": Rect((W + 10) + 30, lid_master_h + 3 * GAP_MM + TURN_MM + RESERVE_MM),
        "lid_inner": Rect(W + 5, D + H + 40),
        "body_inner": Rect((W + 2 * H) + 5, (D + 2 * H) + 5),
    }


def lid_bottom_layouts(W: float, H: float, D: float, lid_h: float, clearance: float) -> Dict[str, Rect]:
    """Telescoping lid and base; the lid is oversized by ``clearance`` to slip over the base."""
    base_w, base_h = W + 2 * H, D + 2 * H
    lid_w = (W + clearance) + 2 * lid_h
    lid_d = (D + clearance) + 2 * lid_h
    return {
        "base_board": Rect(base_w + DIECUT_ADD_MM, base_h + DIECUT_ADD_MM),
        "base_wrap": Rect(base_w + OUTER_ADD_MM, base_h + OUTER_ADD_MM),
        "base_inner": Rect(base_w + DIECUT_ADD_MM - INNER_SUB_MM, base_h + DIECUT_ADD_MM - INNER_SUB_MM),
        "lid_board": Rect(lid_w + DIECUT_ADD_MM, lid_d + DIECUT_ADD_MM),
        "lid_wrap": Rect(lid_w + OUTER_ADD_MM, lid_d + OUTER_ADD_MM),
        "lid_inner": Rect(lid_w + DIECUT_ADD_MM, lid_d + DIECUT_ADD_MM),
    }


def drawer_layouts(W: float, H: float, D: float, clearance: float) -> Dict[str, Rect]:
    """Tray plus a sleeve strip running around top, bottom and both sides."""
    tray_w, tray_h = W + 2 * H, D + 2 * H
    wl, dl, hl = W + clearance, D + clearance, H + clearance
    sleeve_w = 2 * wl + hl
    sleeve_h = dl + 2 * hl
    return {
        "tray_board": Rect(tray_w + DIECUT_ADD_MM, tray_h + DIECUT_ADD_MM),
        "tray_wrap": Rect(tray_w + OUTER_ADD_MM, tray_h + OUTER_ADD_MM),
        "tray_inner": Rect(tray_w + DIECUT_ADD_MM, tray_h + DIECUT_ADD_MM),
        "sleeve_board": Rect(sleeve_w + SLEEVE_DIECUT_ADD_MM, sleeve_h + SLEEVE_DIECUT_ADD_MM),
        "sleeve_wrap": Rect(sleeve_w + SLEEVE_OUTER_ADD_MM, sleeve_h + SLEEVE_OUTER_ADD_MM),
        "sleeve_inner": Rect(sleeve_w + SLEEVE_INNER_ADD_MM, sleeve_h + SLEEVE_INNER_ADD_MM),
    }


def surface_area_m2(W: float, H: float, D: float) -> float:
    return 2 * (W * H + W * D + H * D) / 1e6


def pack_layouts(layouts: Dict[str, Rect], qty: int) -> Dict[str, Packing]:
    return {name: pack_on_sheet(r.w, r.h, qty) for name, r in layouts.items()}
