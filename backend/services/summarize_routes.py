import logging
import sqlite3
from typing import Optional

from fastapi import APIRouter, Cookie, Header, Request
from fastapi.responses import JSONResponse

from models import QuotaStatus, SummarizeRequest, SummarizeResponse
from services.llm_client import ProviderError
from services.quota import LEDGER_UNAVAILABLE_MESSAGE, QuotaDecision

LOGGER = logging.getLogger(__name__)

# ============================ ROUTER ============================
summarize_router = APIRouter(prefix="/api", tags=["summarize"])


def _reply(summary: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"summary": summary}, status_code=status_code)


# ============================ ORCHESTRATION ============================

def run_summarize(
    state,
    provider_name: str,
    payload: SummarizeRequest,
    authorization: Optional[str],
    guest_cookie: Optional[str],
) -> JSONResponse:
    provider = state.providers[provider_name]
    ledger = state.ledger
    guest_gate = state.guest_gate
    charge_on_success = state.settings.quota_charge_on == "success"

    if payload.model not in provider.models:
        return _reply(f"Unsupported model: {payload.model}", 400)

    user_id = state.resolver.resolve(authorization)

    if user_id:
        if charge_on_success:
            decision = ledger.check(user_id)
        else:
            decision = ledger.check_and_consume(user_id)

        if decision == QuotaDecision.DENIED:
            return _reply(ledger.denied_message, 403)
        if decision == QuotaDecision.UNAVAILABLE:
            return _reply(LEDGER_UNAVAILABLE_MESSAGE, 500)
    else:
        LOGGER.info("Processing as guest user")
        if guest_gate.check(guest_cookie) == QuotaDecision.DENIED:
            return _reply(guest_gate.denied_message, 403)

    try:
        summary = provider.summarize(payload.style, payload.input, payload.model)
    except ProviderError as e:
        return _reply(e.message, e.status_code)

    if user_id and charge_on_success:
        if ledger.consume(user_id) == QuotaDecision.DENIED:
            LOGGER.warning("Quota for %s filled up while the request was in flight", user_id)

    response = _reply(summary)
    if not user_id:
        guest_gate.mark_used(response)
    return response


# ============================ ROUTES ============================

@summarize_router.post("/summarize/groq", response_model=SummarizeResponse)
def summarize_groq(
    payload: SummarizeRequest,
    request: Request,
    authorization: Optional[str] = Header(None),
    guest_summary_used: Optional[str] = Cookie(None),
):
    return run_summarize(request.app.state, "groq", payload, authorization, guest_summary_used)


@summarize_router.post("/summarize/ollama", response_model=SummarizeResponse)
def summarize_ollama(
    payload: SummarizeRequest,
    request: Request,
    authorization: Optional[str] = Header(None),
    guest_summary_used: Optional[str] = Cookie(None),
):
    return run_summarize(request.app.state, "ollama", payload, authorization, guest_summary_used)


@summarize_router.post("/summarize", response_model=SummarizeResponse)
def summarize_default(
    payload: SummarizeRequest,
    request: Request,
    authorization: Optional[str] = Header(None),
    guest_summary_used: Optional[str] = Cookie(None),
):
    return run_summarize(request.app.state, "ollama", payload, authorization, guest_summary_used)


@summarize_router.get("/quota", response_model=QuotaStatus)
def quota_status(
    request: Request,
    authorization: Optional[str] = Header(None),
    guest_summary_used: Optional[str] = Cookie(None),
):
    state = request.app.state
    user_id = state.resolver.resolve(authorization)

    if user_id:
        limit = state.ledger.limit
        try:
            used = state.ledger.usage(user_id)
        except sqlite3.Error as e:
            LOGGER.error("Error reading usage for %s: %s", user_id, e)
            used = 0
    else:
        limit = 1
        used = 1 if state.guest_gate.check(guest_summary_used) == QuotaDecision.DENIED else 0

    return QuotaStatus(
        authenticated=bool(user_id),
        used=used,
        limit=limit,
        remaining=max(0, limit - used),
    )
