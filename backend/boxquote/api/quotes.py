from fastapi import APIRouter, HTTPException
from typing import Any, Dict, Literal, Optional
from sqlmodel import select
import json
import logging

from boxquote.api.estimate import BoxParams
from boxquote.db.session import get_session
from boxquote.models.quote import Quote
from boxquote.services.costing import estimate_cost
from boxquote.services.quote import build_quote
from boxquote.services.validation import Validator

logger = logging.getLogger(__name__)
router = APIRouter()


class QuoteRequest(BoxParams):
    email: Optional[str] = None
    audience: Literal["client", "manager"] = "client"


def _quote_record(q: Quote) -> Dict[str, Any]:
    return {
        "id": q.id,
        "created_at": q.created_at.isoformat() if q.created_at else None,
        "box_type": q.box_type,
        "size_mm": [q.width_mm, q.height_mm, q.depth_mm],
        "quantity": q.quantity,
        "total": q.total,
        "per_unit": q.per_unit,
        "currency": q.currency,
        "status": q.status,
        "issues": q.issues,
        "email": q.email,
    }


@router.post("/", status_code=201)
async def create_quote(req: QuoteRequest) -> Dict[str, Any]:
    """Price the box, store the quote and return the summary for the requested audience."""
    inputs = req.to_inputs()
    validation = Validator().ensure_valid(inputs)
    breakdown = estimate_cost(inputs)
    summary = build_quote(inputs, breakdown, req.audience)

    session = get_session()
    try:
        quote = Quote(
            box_type=inputs.box_type,
            width_mm=req.width_mm,
            height_mm=req.height_mm,
            depth_mm=req.depth_mm,
            quantity=breakdown.quantity,
            wrap_paper=inputs.wrap_paper,
            print_mode=inputs.print_mode,
            currency=breakdown.currency,
            total=breakdown.total,
            per_unit=breakdown.per_unit,
            status=validation["decision"],
            issues=",".join(validation["issues"]),
            email=req.email,
            inputs_json=json.dumps(req.model_dump(exclude={"email", "audience"}), ensure_ascii=False),
        )
        session.add(quote)
        session.commit()
        session.refresh(quote)
        logger.info("Created quote id=%s box_type=%s total=%.2f status=%s",
                    quote.id, quote.box_type, quote.total, quote.status)
        quote_id = quote.id
    except Exception as e:
        logger.exception("Failed to store quote: %s", e)
        raise HTTPException(status_code=500, detail="Failed to store quote")
    finally:
        session.close()

    return {
        "quote_id": quote_id,
        "validation": validation,
        "summary": summary,
        "breakdown": breakdown.to_dict(),
    }


@router.get("/")
async def list_quotes():
    session = get_session()
    try:
        rows = session.exec(select(Quote).order_by(Quote.id)).all()
        return [_quote_record(q) for q in rows]
    finally:
        session.close()


@router.get("/{quote_id}")
async def get_quote(quote_id: int):
    session = get_session()
    try:
        quote = session.get(Quote, quote_id)
        if quote is None:
            logger.warning("Quote requested for missing id=%s", quote_id)
            raise HTTPException(status_code=404, detail="Quote not found")
        record = _quote_record(quote)
        record["inputs"] = json.loads(quote.inputs_json)
        return record
    finally:
        session.close()
