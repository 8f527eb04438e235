import math
from typing import Any, Dict, List

from boxquote.services import layout
from boxquote.services import rates
from boxquote.services.costing import (
    BOX_TYPES,
    INNER_MODES,
    LAMINATIONS,
    MAX_QUANTITY,
    PRINT_MODES,
    CostInputs,
    estimate_cost,
)


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


class InvalidInputError(Exception):
    """Raised when box parameters are rejected rather than clamped."""

    def __init__(self, issues: List[str]) -> None:
        self.issues = issues
        super().__init__(f"Invalid box parameters: {', '.join(issues)}")


class Validator:
    """Checks box parameters before they are priced.

    Rules:
    - non-finite, non-positive or oversized dimension -> rejected
    - non-finite quantity, quantity < 1 or above MAX_QUANTITY -> rejected
    - logo with a non-finite size -> rejected
    - option values outside the known sets -> needs_review (the estimator substitutes defaults)
    - a part whose flat pattern does not fit the stock sheet -> needs_review
    - logo with a non-positive size -> needs_review
    - lamination chosen on a paper that cannot be laminated -> needs_review

    Deterministic: issues are returned sorted.
    """

    def _add_issue(self, issues: List[str], issue: str) -> None:
        if issue not in issues:
            issues.append(issue)

    def _check_choice(self, issues: List[str], name: str, value: Any, allowed) -> None:
        if value not in allowed:
            self._add_issue(issues, f"unknown_{name}:{value}")

    def validate(self, inputs: CostInputs) -> Dict[str, Any]:
        issues: List[str] = []

        for name in ("width_mm", "height_mm", "depth_mm"):
            value = getattr(inputs, name)
            f = _as_float(value)
            if not math.isfinite(f) or f <= 0 or f > layout.MAX_DIMENSION_MM:
                self._add_issue(issues, f"invalid_dimension:{name}")

        qty = _as_float(inputs.quantity)
        if not math.isfinite(qty) or qty < 1 or qty > MAX_QUANTITY:
            self._add_issue(issues, "invalid_quantity")

        self._check_choice(issues, "box_type", inputs.box_type, BOX_TYPES)
        self._check_choice(issues, "base_board", inputs.base_board, rates.BASE_BOARDS)
        self._check_choice(issues, "wrap_paper", inputs.wrap_paper, rates.WRAP_PAPERS)
        self._check_choice(issues, "inner_paper", inputs.inner_paper, rates.INNER_PAPERS)
        self._check_choice(issues, "drawer_sleeve_paper", inputs.drawer_sleeve_paper, rates.INNER_PAPERS)
        self._check_choice(issues, "inner_mode", inputs.inner_mode, INNER_MODES)
        self._check_choice(issues, "print", inputs.print_mode, PRINT_MODES)
        lam_field = "wrap_lamination" if inputs.box_type == "casket" else "lamination"
        lam = getattr(inputs, lam_field)
        self._check_choice(issues, lam_field, lam, LAMINATIONS)

        if inputs.wrap_paper in rates.NO_LAMINATION_PAPERS and lam not in (None, "none"):
            self._add_issue(issues, "lamination_ignored")

        for index, logo in enumerate(inputs.logos_meta or (), start=1):
            sizes = [_as_float(logo.w_mm), _as_float(logo.h_mm)]
            if not all(math.isfinite(s) for s in sizes):
                self._add_issue(issues, f"invalid_logo_size:{index}")
            elif min(sizes) <= 0:
                self._add_issue(issues, f"logo_invalid_size:{index}")

        # Only worth laying out once the numbers themselves are sane
        if not any(i.startswith("invalid_") for i in issues):
            for part in estimate_cost(inputs).parts:
                if part.used and part.per_sheet == 0:
                    self._add_issue(issues, f"oversized_part:{part.name}")

        if any(i.startswith("invalid_") for i in issues):
            decision = "rejected"
        elif issues:
            decision = "needs_review"
        else:
            decision = "ok"

        return {"decision": decision, "issues": sorted(issues)}

    def ensure_valid(self, inputs: CostInputs) -> Dict[str, Any]:
        result = self.validate(inputs)
        if result["decision"] == "rejected":
            raise InvalidInputError(result["issues"])
        return result
