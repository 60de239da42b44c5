"""
EmailAssist — FastAPI Backend
=============================
  - Donation confirmation + donor registry  (ProcessDonationUseCase)
  - Support inbox poller                     (off unless ENABLE_IMAP=true)

Start:
    uvicorn main_api:app --reload --port 4000

Interactive docs:
    http://localhost:4000/docs
"""

import logging
from typing import Optional, Union

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from emailassist.infrastructure.config import (
    DEFAULT_CAMPAIGN_NAME,
    Config,
    cors_origins_from_env,
)
from emailassist.use_cases.process_donation import (
    DonationFailure,
    ProcessDonationRequest,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(name)s: %(message)s")
logger = logging.getLogger(__name__)

SEND_FAILED_ERROR = "Failed to send donation email."

# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(title="EmailAssist API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_from_env(),
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Dependency-injection container (initialised at startup) ───────────────────

_container = None
_startup_error: Optional[str] = None


def configure(container) -> None:
    """Inject a fully-wired container (tests, or an embedding process)."""
    global _container, _startup_error
    _container = container
    _startup_error = None


@app.on_event("startup")
async def startup():
    global _container, _startup_error
    if _container is None:
        try:
            from emailassist.infrastructure.container import Container

            _container = Container(Config.from_env())
            logger.info("Container initialised successfully.")
        except Exception as e:
            _startup_error = str(e)
            logger.error(f"Container startup failed: {e}")
            return
    _container.inbox_poller.start()


@app.on_event("shutdown")
async def shutdown():
    if _container is not None:
        await _container.inbox_poller.stop()


def get_container():
    if _startup_error:
        raise HTTPException(status_code=503, detail=f"Service misconfigured: {_startup_error}")
    if _container is None:
        raise HTTPException(status_code=503, detail="Service not ready.")
    return _container


# ── Error handlers ────────────────────────────────────────────────────────────


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    fields = ", ".join(
        ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid request body: {fields}"},
    )


# ── Request models ────────────────────────────────────────────────────────────


class DonationEmailIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    soulmark: Optional[str] = None
    amount: Optional[Union[int, float, str]] = None
    currency: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")


# ── Health ────────────────────────────────────────────────────────────────────


@app.get("/health", tags=["meta"])
async def health():
    campaign = _container.config.campaign_name if _container else DEFAULT_CAMPAIGN_NAME
    return {"ok": True, "campaign": campaign}


# ── Donations ─────────────────────────────────────────────────────────────────


@app.post("/api/donation-email", tags=["donations"])
async def donation_email(body: DonationEmailIn):
    """Send the donation confirmation, then record the donor in the registry."""
    c = get_container()

    try:
        result = await c.process_donation_use_case.execute(
            ProcessDonationRequest(
                email=body.email,
                soulmark=body.soulmark,
                name=body.name,
                amount=body.amount,
                currency=body.currency,
                session_id=body.session_id,
            )
        )
    except Exception as e:
        logger.error(f"Error in /api/donation-email: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": SEND_FAILED_ERROR},
        )

    if result.success:
        return {"ok": True}

    if result.failure is DonationFailure.VALIDATION:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": result.error},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": SEND_FAILED_ERROR},
    )
