from typing import Dict

# Stock sheet prices, per 1000x700 sheet
SHEET_PRICE: Dict[str, float] = {
    "chip_1_5": 115.0,
    "chip_2_0": 140.0,
    "designer_120": 135.0,
    "coated_150": 128.0,
    "offset_150": 118.0,
    "none": 0.0,
}

BASE_BOARDS = ("chip_1_5", "chip_2_0")
WRAP_PAPERS = ("designer_120", "offset_150", "coated_150")
INNER_PAPERS = ("none", "offset_150", "coated_150")

DEFAULT_BASE_BOARD = "chip_1_5"
DEFAULT_WRAP_PAPER = "designer_120"

# Wrap papers that cannot take lamination / that must be laminated
NO_LAMINATION_PAPERS = {"designer_120"}
LAMINATION_REQUIRED_PAPERS = {"offset_150", "coated_150"}

# per m2
LAMINATION_RATE: Dict[str, float] = {
    "none": 0.0,
    "matt": 18.0,
    "gloss": 15.0,
}
DEFAULT_REQUIRED_LAMINATION = "matt"

# per m2
PRINT_RATE: Dict[str, float] = {
    "logosOnly": 38.0,
    "fullWrap": 125.0,
}

SPOT_UV_RATE = 48.0  # per m2

# per unit
WORK_RATE: Dict[str, float] = {
    "guillotine_cut": 5.0,
    "bottom_lamination": 10.0,
    "diecut": 5.0,
    "corner_glue": 5.0,
    "wrap": 60.0,
    "lid_glue": 10.0,
    "stamping": 10.0,
    "pack": 5.0,
}

# Applied to every unit regardless of options; stamping is charged separately
# per active embossing/foil process.
BASE_WORK_STEPS = (
    "guillotine_cut",
    "bottom_lamination",
    "diecut",
    "corner_glue",
    "wrap",
    "lid_glue",
    "pack",
)

MAGNETS_PAIR_PER_BOX = 9.5
SETUP_FEE = 900.0
OVERHEAD_PCT = 0.18

CLICHE_CM2_RATE = 59.0

# (min quantity, discount), highest threshold first
DISCOUNT_TIERS = (
    (5000, 0.10),
    (3000, 0.06),
    (1500, 0.04),
    (500, 0.025),
)


def tier_discount(quantity: int) -> float:
    """Volume discount factor applied to the subtotal."""
    for threshold, pct in DISCOUNT_TIERS:
        if quantity >= threshold:
            return pct
    return 0.0


def sheet_price(stock: str) -> float:
    return SHEET_PRICE.get(stock, 0.0)


def lamination_policy(wrap_paper: str) -> Dict[str, bool]:
    """Whether the lamination selector should be disabled or forced for a wrap paper."""
    return {
        "disabled": wrap_paper in NO_LAMINATION_PAPERS,
        "required": wrap_paper in LAMINATION_REQUIRED_PAPERS,
    }
