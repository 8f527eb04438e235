"""Cost estimation for rigid gift boxes.

``estimate_cost`` is a pure function: the same ``CostInputs`` always give the
same ``CostBreakdown``. Malformed numbers are clamped and unknown option values
fall back to defaults, so a half-typed form in the configurator never breaks
the price panel. Use ``Validator`` when bad input should be rejected instead.
"""
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from boxquote.services import layout
from boxquote.services import rates

logger = logging.getLogger(__name__)

BOX_TYPES = ("casket", "lidBottom", "drawer", "hex")
PRINT_MODES = ("logosOnly", "fullWrap")
LAMINATIONS = ("none", "matt", "gloss")
INNER_MODES = ("none", "bottom")

DEFAULT_CURRENCY = "₽"
MAX_QUANTITY = 10_000_000


@dataclass(frozen=True)
class LogoPlacement:
    side: str
    w_mm: float
    h_mm: float

    @property
    def area_mm2(self) -> float:
        return _length(self.w_mm) * _length(self.h_mm)


@dataclass(frozen=True)
class Finishing:
    blind_emboss: bool = False
    foil_stamp: bool = False
    spot_uv: bool = False
    magnets_pair: bool = False

    @property
    def stamping_processes(self) -> int:
        """Number of cliché-based processes (blind embossing, foil stamping)."""
        return int(bool(self.blind_emboss)) + int(bool(self.foil_stamp))


@dataclass(frozen=True)
class CostInputs:
    box_type: str
    width_mm: float
    height_mm: float
    depth_mm: float
    quantity: int
    base_board: str = rates.DEFAULT_BASE_BOARD
    wrap_paper: str = rates.DEFAULT_WRAP_PAPER
    lamination: str = "none"
    wrap_lamination: str = "none"
    inner_paper: str = "none"
    inner_mode: str = "none"
    drawer_sleeve_inner: bool = False
    drawer_sleeve_paper: str = "none"
    print_mode: str = "logosOnly"
    finishing: Finishing = field(default_factory=Finishing)
    logos_meta: Sequence[LogoPlacement] = ()
    lid_height_mm: Optional[float] = None
    lid_clearance_mm: Optional[float] = None
    lid_long: bool = False
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class PartLayout:
    name: str
    w_mm: float
    h_mm: float
    per_sheet: int
    sheets: int
    used: bool


@dataclass(frozen=True)
class ClicheRow:
    index: int
    side: str
    w_mm: int
    h_mm: int
    area_cm2: float
    processes: int
    cost: float


@dataclass
class CostBreakdown:
    currency: str
    quantity: int
    sheets: Dict[str, int]
    sheets_breakdown: Dict[str, int]
    parts: List[PartLayout]
    material_cost: float
    lamination_cost: float
    print_cost: float
    cliche_cost: float
    cliche_breakdown: List[ClicheRow]
    cliche: Dict[str, int]
    finishing_cost: float
    work_cost: float
    overhead: float
    discount: float
    total: float
    per_unit: float
    area_m2: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _Consumption:
    """Sheets and material money spent on one print run of a box type."""
    board: int = 0
    wrap: int = 0
    inner: int = 0
    tray_inner: int = 0
    sleeve_inner: int = 0
    material_cost: float = 0.0
    outer_area_m2: float = 0.0  # wrapped (printable, laminated) area per unit
    parts: List[PartLayout] = field(default_factory=list)


def _round_half_up(value: float, digits: int = 0) -> float:
    m = 10 ** digits
    if not math.isfinite(value * m):
        return 0.0
    return math.floor(value * m + 0.5) / m


def _number(value: Any) -> Optional[float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _dimension(value: Any) -> float:
    f = _number(value)
    if not f:
        return 1.0
    return min(layout.MAX_DIMENSION_MM, max(1.0, f))


def _length(value: Any) -> float:
    f = _number(value)
    if f is None:
        return 0.0
    return min(layout.MAX_DIMENSION_MM, max(0.0, f))


def _quantity(value: Any) -> int:
    f = _number(value)
    if not f:
        return 1
    return min(MAX_QUANTITY, max(1, math.floor(f)))


def _choice(value: Any, allowed: Sequence[str], default: str) -> str:
    return value if value in allowed else default


def _parts(layouts: Dict[str, layout.Rect], packed: Dict[str, layout.Packing], used: Sequence[str]) -> List[PartLayout]:
    parts = []
    for name, rect in layouts.items():
        p = packed[name]
        if p.per_sheet == 0 and name in used:
            logger.warning("Part %s (%.0fx%.0f mm) does not fit a %.0fx%.0f sheet",
                           name, rect.w, rect.h, layout.SHEET_W_MM, layout.SHEET_H_MM)
        parts.append(PartLayout(name, rect.w, rect.h, p.per_sheet, p.sheets, name in used))
    return parts


def _casket(W, H, D, qty, board_price, wrap_price, inner_price, add_bottom) -> _Consumption:
    L = layout.casket_layouts(W, H, D)
    P = layout.pack_layouts(L, qty)
    body_inner = P["body_inner"].sheets if add_bottom else 0

    c = _Consumption()
    c.board = P["body_board"].sheets + P["lid_board"].sheets
    # the lid lining is cut together with the wraps but priced as lining paper
    c.wrap = P["body_wrap"].sheets + P["lid_wrap"].sheets + P["lid_inner"].sheets
    c.inner = body_inner
    c.material_cost = (
        c.board * board_price
        + (P["body_wrap"].sheets + P["lid_wrap"].sheets) * wrap_price
        + P["lid_inner"].sheets * inner_price
        + body_inner * inner_price
    )
    c.outer_area_m2 = L["body_wrap"].area_m2 + L["lid_wrap"].area_m2
    used = ["body_board", "lid_board", "body_wrap", "lid_wrap", "lid_inner"]
    if add_bottom:
        used.append("body_inner")
    c.parts = _parts(L, P, used)
    return c


def _lid_bottom(W, H, D, qty, lid_h, clearance, board_price, wrap_price, inner_price, add_bottom) -> _Consumption:
    L = layout.lid_bottom_layouts(W, H, D, lid_h, clearance)
    P = layout.pack_layouts(L, qty)
    base_inner = P["base_inner"].sheets if add_bottom else 0

    c = _Consumption()
    c.board = P["base_board"].sheets + P["lid_board"].sheets
    c.wrap = P["base_wrap"].sheets + P["lid_wrap"].sheets + P["lid_inner"].sheets
    c.inner = base_inner
    c.material_cost = (
        c.board * board_price
        + (P["base_wrap"].sheets + P["lid_wrap"].sheets) * wrap_price
        + P["lid_inner"].sheets * inner_price
        + base_inner * inner_price
    )
    c.outer_area_m2 = L["base_wrap"].area_m2 + L["lid_wrap"].area_m2
    used = ["base_board", "base_wrap", "lid_board", "lid_wrap", "lid_inner"]
    if add_bottom:
        used.append("base_inner")
    c.parts = _parts(L, P, used)
    return c


def _drawer(W, H, D, qty, clearance, board_price, wrap_price, tray_inner_price, sleeve_inner_price,
            add_tray_inner, add_sleeve_inner) -> _Consumption:
    L = layout.drawer_layouts(W, H, D, clearance)
    P = layout.pack_layouts(L, qty)

    c = _Consumption()
    c.board = P["tray_board"].sheets + P["sleeve_board"].sheets
    c.wrap = P["tray_wrap"].sheets + P["sleeve_wrap"].sheets
    c.tray_inner = P["tray_inner"].sheets if add_tray_inner else 0
    c.sleeve_inner = P["sleeve_inner"].sheets if add_sleeve_inner else 0
    c.inner = c.tray_inner + c.sleeve_inner
    c.material_cost = (
        c.board * board_price
        + c.wrap * wrap_price
        + c.tray_inner * tray_inner_price
        + c.sleeve_inner * sleeve_inner_price
    )
    c.outer_area_m2 = L["tray_wrap"].area_m2 + L["sleeve_wrap"].area_m2
    used = ["tray_board", "tray_wrap", "sleeve_board", "sleeve_wrap"]
    if add_tray_inner:
        used.append("tray_inner")
    if add_sleeve_inner:
        used.append("sleeve_inner")
    c.parts = _parts(L, P, used)
    return c


def _fallback(W, H, D, qty, board_price, wrap_price) -> _Consumption:
    surface = layout.surface_area_m2(W, H, D)
    sheet_m2 = layout.sheet_area_m2()

    c = _Consumption()
    c.outer_area_m2 = surface * layout.FALLBACK_WRAP_FRACTION
    c.board = math.ceil((surface * qty) / sheet_m2)
    c.wrap = math.ceil((c.outer_area_m2 * qty) / sheet_m2)
    c.material_cost = c.board * board_price + c.wrap * wrap_price
    return c


def logos_area_m2(logos: Sequence[LogoPlacement]) -> float:
    if not logos:
        return 0.0
    return sum(l.area_mm2 for l in logos) / 1e6


def cliche_rows(logos: Sequence[LogoPlacement], processes: int) -> List[ClicheRow]:
    """Per-logo cliché plate cost, rounded the way the quote prints it."""
    rows: List[ClicheRow] = []
    if not processes or not logos:
        return rows
    for index, logo in enumerate(logos, start=1):
        area_cm2 = logo.area_mm2 / 100
        cost = area_cm2 * rates.CLICHE_CM2_RATE * processes
        rows.append(ClicheRow(
            index=index,
            side=logo.side,
            w_mm=int(_round_half_up(_length(logo.w_mm))),
            h_mm=int(_round_half_up(_length(logo.h_mm))),
            area_cm2=_round_half_up(area_cm2, 1),
            processes=processes,
            cost=_round_half_up(cost),
        ))
    return rows


def estimate_cost(i: CostInputs) -> CostBreakdown:
    qty = _quantity(i.quantity)
    W = _dimension(i.width_mm)
    H = _dimension(i.height_mm)
    D = _dimension(i.depth_mm)

    base_board = _choice(i.base_board, rates.BASE_BOARDS, rates.DEFAULT_BASE_BOARD)
    wrap_paper = _choice(i.wrap_paper, rates.WRAP_PAPERS, rates.DEFAULT_WRAP_PAPER)
    inner_paper = _choice(i.inner_paper, rates.INNER_PAPERS, "none")
    sleeve_paper = _choice(i.drawer_sleeve_paper, rates.INNER_PAPERS, "none")
    print_mode = _choice(i.print_mode, PRINT_MODES, "logosOnly")
    add_bottom = i.inner_mode == "bottom"

    board_price = rates.sheet_price(base_board)
    wrap_price = rates.sheet_price(wrap_paper)
    inner_price = rates.sheet_price(inner_paper if inner_paper != "none" else wrap_paper)

    clearance = _number(i.lid_clearance_mm)
    clearance = _length(layout.LID_CLEARANCE_MM_DEFAULT if clearance is None else clearance)

    if i.box_type == "casket":
        c = _casket(W, H, D, qty, board_price, wrap_price, inner_price, add_bottom)
    elif i.box_type == "lidBottom":
        lid_h = _number(i.lid_height_mm)
        if lid_h is None:
            lid_h = H if i.lid_long else layout.LID_HEIGHT_MM_DEFAULT
        c = _lid_bottom(W, H, D, qty, _dimension(lid_h), clearance,
                        board_price, wrap_price, inner_price, add_bottom)
    elif i.box_type == "drawer":
        sleeve_inner_price = rates.sheet_price(sleeve_paper if sleeve_paper != "none" else wrap_paper)
        c = _drawer(W, H, D, qty, clearance, board_price, wrap_price, inner_price, sleeve_inner_price,
                    add_bottom, bool(i.drawer_sleeve_inner))
    else:
        c = _fallback(W, H, D, qty, board_price, wrap_price)

    area_lam_m2 = c.outer_area_m2 * qty
    area_print_m2 = area_lam_m2 if print_mode == "fullWrap" else 0.0
    logos_m2 = logos_area_m2(i.logos_meta)
    area_logos_m2 = logos_m2 if print_mode == "logosOnly" else 0.0

    lamination_cost = 0.0
    if wrap_paper not in rates.NO_LAMINATION_PAPERS:
        lam = i.wrap_lamination if i.box_type == "casket" else i.lamination
        if lam not in rates.LAMINATION_RATE or lam == "none":
            lam = rates.DEFAULT_REQUIRED_LAMINATION
        lamination_cost = rates.LAMINATION_RATE[lam] * area_lam_m2

    if print_mode == "fullWrap":
        print_cost = rates.PRINT_RATE["fullWrap"] * area_print_m2
    else:
        # logo area is per unit and is not multiplied by qty
        print_cost = rates.PRINT_RATE["logosOnly"] * area_logos_m2

    finishing = i.finishing or Finishing()
    procs = finishing.stamping_processes
    rows = cliche_rows(i.logos_meta, procs)
    cliche_cost = _round_half_up(sum(r.cost for r in rows))
    cliche_area_cm2 = int(_round_half_up(sum(r.area_cm2 for r in rows)))

    finishing_cost = 0.0
    if finishing.spot_uv:
        if print_mode == "logosOnly" and logos_m2 > 0:
            area_uv = logos_m2
        else:
            area_uv = area_lam_m2 / qty
        finishing_cost += rates.SPOT_UV_RATE * area_uv * qty
    if finishing.magnets_pair:
        finishing_cost += rates.MAGNETS_PAIR_PER_BOX * qty

    work_cost = 0.0
    for step in rates.BASE_WORK_STEPS:
        work_cost += rates.WORK_RATE[step] * qty
    if procs > 0:
        work_cost += rates.WORK_RATE["stamping"] * qty * procs
    work_cost += rates.SETUP_FEE

    subtotal = c.material_cost + lamination_cost + print_cost + finishing_cost + work_cost
    overhead = subtotal * rates.OVERHEAD_PCT
    discount = subtotal * rates.tier_discount(qty)
    total = subtotal + overhead - discount
    per_unit = total / qty

    logger.debug("Estimated box_type=%s size=%sx%sx%s qty=%s total=%.2f per_unit=%.2f",
                 i.box_type, W, H, D, qty, total, per_unit)

    return CostBreakdown(
        currency=i.currency or DEFAULT_CURRENCY,
        quantity=qty,
        sheets={"board": c.board, "wrap": c.wrap, "inner": c.inner},
        sheets_breakdown={"tray_inner_sheets": c.tray_inner, "sleeve_inner_sheets": c.sleeve_inner},
        parts=c.parts,
        material_cost=c.material_cost,
        lamination_cost=lamination_cost,
        print_cost=print_cost,
        cliche_cost=cliche_cost,
        cliche_breakdown=rows,
        cliche={"total_area_cm2": cliche_area_cm2, "processes": procs},
        finishing_cost=finishing_cost,
        work_cost=work_cost,
        overhead=overhead,
        discount=discount,
        total=total,
        per_unit=per_unit,
        area_m2=(c.board + c.wrap + c.inner) * layout.sheet_area_m2() / qty,
    )


estimate_price = estimate_cost
