from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
import logging
import os

from boxquote.services import rates
from boxquote.services.costing import (
    BOX_TYPES,
    INNER_MODES,
    LAMINATIONS,
    PRINT_MODES,
    CostInputs,
    Finishing,
    LogoPlacement,
    estimate_cost,
)
from boxquote.services.validation import Validator

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "₽")


class FinishingOptions(BaseModel):
    blind_emboss: bool = False
    foil_stamp: bool = False
    spot_uv: bool = False
    magnets_pair: bool = False


class LogoMeta(BaseModel):
    side: str
    w_mm: float
    h_mm: float


class BoxParams(BaseModel):
    """Box configuration as sent by the configurator. Values are not range-checked here."""
    model_config = ConfigDict(populate_by_name=True)

    box_type: str
    width_mm: float
    height_mm: float
    depth_mm: float
    quantity: float = 1
    currency: Optional[str] = None
    base_board: str = rates.DEFAULT_BASE_BOARD
    wrap_paper: str = rates.DEFAULT_WRAP_PAPER
    lamination: str = "none"
    wrap_lamination: str = "none"
    inner_paper: str = "none"
    inner_mode: str = "none"
    drawer_sleeve_inner: bool = False
    drawer_sleeve_paper: str = "none"
    # "print" in the configurator payload
    print_mode: str = Field("logosOnly", alias="print")
    finishing: FinishingOptions = Field(default_factory=FinishingOptions)
    logos_meta: List[LogoMeta] = Field(default_factory=list)
    lid_height_mm: Optional[float] = None
    lid_clearance_mm: Optional[float] = None
    lid_long: bool = False

    def to_inputs(self) -> CostInputs:
        return CostInputs(
            box_type=self.box_type,
            width_mm=self.width_mm,
            height_mm=self.height_mm,
            depth_mm=self.depth_mm,
            quantity=self.quantity,
            currency=self.currency or DEFAULT_CURRENCY,
            base_board=self.base_board,
            wrap_paper=self.wrap_paper,
            lamination=self.lamination,
            wrap_lamination=self.wrap_lamination,
            inner_paper=self.inner_paper,
            inner_mode=self.inner_mode,
            drawer_sleeve_inner=self.drawer_sleeve_inner,
            drawer_sleeve_paper=self.drawer_sleeve_paper,
            print_mode=self.print_mode,
            finishing=Finishing(**self.finishing.model_dump()),
            logos_meta=tuple(LogoPlacement(l.side, l.w_mm, l.h_mm) for l in self.logos_meta),
            lid_height_mm=self.lid_height_mm,
            lid_clearance_mm=self.lid_clearance_mm,
            lid_long=self.lid_long,
        )


@router.post("/")
async def estimate_box(req: BoxParams, strict: bool = False) -> Dict[str, Any]:
    """Price a box. With ``strict=true`` invalid parameters are rejected instead of clamped."""
    inputs = req.to_inputs()
    if strict:
        Validator().ensure_valid(inputs)
    breakdown = estimate_cost(inputs)
    logger.info("Estimate box_type=%s qty=%s => total=%.2f", inputs.box_type, breakdown.quantity, breakdown.total)
    return breakdown.to_dict()


@router.get("/options")
async def estimate_options() -> Dict[str, Any]:
    """Selectable values and the rate table, for building the configurator form."""
    return {
        "box_types": list(BOX_TYPES),
        "base_boards": list(rates.BASE_BOARDS),
        "wrap_papers": list(rates.WRAP_PAPERS),
        "inner_papers": list(rates.INNER_PAPERS),
        "inner_modes": list(INNER_MODES),
        "laminations": list(LAMINATIONS),
        "print_modes": list(PRINT_MODES),
        "lamination_policy": {p: rates.lamination_policy(p) for p in rates.WRAP_PAPERS},
        "rates": {
            "sheet_price": rates.SHEET_PRICE,
            "lamination": rates.LAMINATION_RATE,
            "print": rates.PRINT_RATE,
            "spot_uv": rates.SPOT_UV_RATE,
            "work": rates.WORK_RATE,
            "magnets_pair_per_box": rates.MAGNETS_PAIR_PER_BOX,
            "setup": rates.SETUP_FEE,
            "overhead_pct": rates.OVERHEAD_PCT,
            "cliche_cm2": rates.CLICHE_CM2_RATE,
            "discount_tiers": [{"min_quantity": q, "discount": d} for q, d in rates.DISCOUNT_TIERS],
        },
        "currency": DEFAULT_CURRENCY,
    }
