from fastapi import APIRouter

from boxquote.api.estimate import BoxParams
from boxquote.services.validation import Validator

router = APIRouter()


@router.post("/")
async def validate_box(req: BoxParams):
    v = Validator()
    result = v.validate(req.to_inputs())
    return result
