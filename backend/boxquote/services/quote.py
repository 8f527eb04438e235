"""Quote summaries for the client and manager PDFs and the price panel."""
import math
from typing import Any, Dict, List

from boxquote.services.costing import CostBreakdown, CostInputs

AUDIENCES = ("client", "manager")

BOX_TYPE_LABELS = {
    "casket": "Casket",
    "lidBottom": "Lid and base",
    "drawer": "Drawer",
    "hex": "Hexagonal",
}

BOARD_LABELS = {
    "chip_1_5": "Binder board 1.5 mm",
    "chip_2_0": "Binder board 2.0 mm",
}

PAPER_LABELS = {
    "designer_120": "Designer paper 120 g/m²",
    "offset_150": "Offset paper 150 g/m²",
    "coated_150": "Coated paper 150 g/m²",
    "none": "—",
}


def fmt(n: float, currency: str = "₽") -> str:
    """Whole-number money with ru-RU digit grouping, e.g. ``12 345 ₽``."""
    try:
        n = float(n or 0)
    except (TypeError, ValueError):
        n = 0.0
    if not math.isfinite(n):
        n = 0.0
    value = int(math.floor(n + 0.5))
    grouped = f"{abs(value):,}".replace(",", "\u00a0")
    sign = "-" if value < 0 else ""
    return f"{sign}{grouped} {currency}"


def _lamination_text(inputs: CostInputs) -> str:
    if inputs.wrap_paper == "designer_120":
        return "lamination: none"
    lam = inputs.wrap_lamination if inputs.box_type == "casket" else inputs.lamination
    if lam not in ("matt", "gloss"):
        lam = "matt"
    return f"lamination: {lam}"


def order_parameter_lines(inputs: CostInputs, qty: int) -> List[str]:
    """Header lines describing what was ordered.

    ``qty`` is the run length the estimator priced (``CostBreakdown.quantity``).
    """
    lining = inputs.wrap_paper if inputs.box_type in ("lidBottom", "casket") else "none"
    return [
        f"Type: {BOX_TYPE_LABELS.get(inputs.box_type, inputs.box_type or 'Box')}",
        f"Size (mm): W {inputs.width_mm} × H {inputs.height_mm} × D {inputs.depth_mm}",
        f"Run: {qty} pcs",
        f"Board: {BOARD_LABELS.get(inputs.base_board, inputs.base_board or '—')}",
        f"Wrap: {PAPER_LABELS.get(inputs.wrap_paper, inputs.wrap_paper or '—')} ({_lamination_text(inputs)})",
        f"Lining: {PAPER_LABELS.get(lining, lining)}",
        "Print: " + ("full colour, whole wrap" if inputs.print_mode == "fullWrap" else "logos only"),
    ]


def build_quote(inputs: CostInputs, breakdown: CostBreakdown, audience: str = "client") -> Dict[str, Any]:
    """Numbers a quote document renders.

    The client sees the run length and the prices. The manager copy adds every
    cost line, sheet counts and the cliché table.
    """
    if audience not in AUDIENCES:
        raise ValueError(f"Unknown quote audience: {audience}")

    cur = breakdown.currency
    quote: Dict[str, Any] = {
        "audience": audience,
        "parameters": order_parameter_lines(inputs, breakdown.quantity),
        "quantity": breakdown.quantity,
        "total": fmt(breakdown.total, cur),
        "per_unit": fmt(breakdown.per_unit, cur),
    }
    if audience == "client":
        return quote

    quote["lines"] = [
        {"label": "Materials", "amount": fmt(breakdown.material_cost, cur)},
        {"label": "Lamination", "amount": fmt(breakdown.lamination_cost, cur)},
        {"label": "Print", "amount": fmt(breakdown.print_cost, cur)},
        {"label": "Finishing", "amount": fmt(breakdown.finishing_cost, cur)},
        {"label": "Work", "amount": fmt(breakdown.work_cost, cur)},
        {"label": "Overhead", "amount": fmt(breakdown.overhead, cur)},
        {"label": "Discount", "amount": fmt(-breakdown.discount, cur)},
    ]
    quote["sheets"] = dict(breakdown.sheets, **breakdown.sheets_breakdown)
    quote["cliche"] = {
        "cost": fmt(breakdown.cliche_cost, cur),
        "total_area_cm2": breakdown.cliche["total_area_cm2"],
        "processes": breakdown.cliche["processes"],
        "rows": [
            {
                "index": r.index,
                "side": r.side,
                "size_mm": f"{r.w_mm}×{r.h_mm}",
                "area_cm2": r.area_cm2,
                "cost": fmt(r.cost, cur),
            }
            for r in breakdown.cliche_breakdown
        ],
    }
    return quote
