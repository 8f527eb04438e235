from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel
import logging
import os

from boxquote.api import estimate, validate, quotes
from boxquote.db.session import get_engine
from boxquote.services.validation import InvalidInputError

logger = logging.getLogger(__name__)

app = FastAPI(title="Box Cost Estimator")

# CORS for the configurator frontend
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(estimate.router, prefix="/estimate", tags=["estimate"])
app.include_router(validate.router, prefix="/validate", tags=["validate"])
app.include_router(quotes.router, prefix="/quotes", tags=["quotes"])


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    logger.warning("Rejected box parameters path=%s issues=%s", request.url.path, exc.issues)
    return JSONResponse(
        status_code=422,
        content={
            "error": str(exc),
            "error_type": "invalid_input",
            "details": exc.issues,
        },
    )


@app.on_event("startup")
def on_startup():
    engine = get_engine()
    SQLModel.metadata.create_all(engine)


@app.get("/")
async def root():
    return {"status": "ok", "service": "box-cost-estimator"}
