# gateway/api.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Body, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agents.chat.agent import deepseek_chat, explore_gemini, gemini_chat
from agents.disease.agent import disease_details, summarize_disease
from agents.mindmap.agent import generate_mind_map
from tools import openfda, pubmed, usda_fdc
from tools.medical_schema import (
    DeepSeekChatRequest,
    DiseaseDetailsRequest,
    DiseaseSummaryRequest,
    ExploreGeminiRequest,
    GeminiChatRequest,
    GuidelineRequest,
    InteractionRequest,
    MindMapRequest,
    NucleusSubmissionRequest,
    TransactionRequest,
    TurnstileRequest,
)
from utils import news_repo, nucleus_repo, payments
from utils.errors import ServiceError
from utils.logging_config import get_logger, setup_logging
from utils.supabase_utils import integration_status
from utils.turnstile import verify_turnstile

setup_logging()
logger = get_logger("gateway.api")

app = FastAPI(title="MedTools API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _client_ip(request: Request) -> str | None:
    # Cloudflare / proxies put the caller first in these headers
    for header in ("cf-connecting-ip", "x-forwarded-for"):
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()
    return request.client.host if request.client else None


# ---- Error mapping -------------------------------------------------------------
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    error_id = uuid.uuid4().hex[:12]
    logger.exception("unhandled error %s on %s %s", error_id, request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id, "error_type": type(exc).__name__},
    )


# ---- Health ------------------------------------------------------------------------
@app.get("/health")
def root_health():
    return {"ok": True, "service": "medtools-api", "time": _now()}


@app.get("/checks/health")
def checks_health():
    checks = integration_status()
    return {"ok": checks.get("supabase") == "ok", "checks": checks, "time": _now()}


# ---- AI ------------------------------------------------------------------------------
@app.post("/api/mindmap")
def mindmap(req: MindMapRequest):
    return generate_mind_map(req.topic)


@app.post("/api/gemini/explore")
def gemini_explore(req: ExploreGeminiRequest):
    return explore_gemini(req)


@app.post("/api/gemini/chat")
def gemini_chat_route(req: GeminiChatRequest):
    return gemini_chat(req)


@app.post("/api/deepseek/chat")
def deepseek_chat_route(req: DeepSeekChatRequest):
    return deepseek_chat(req)


@app.post("/api/disease/summary")
def disease_summary(req: DiseaseSummaryRequest):
    return summarize_disease(req.query)


@app.post("/api/disease/details")
def disease_details_route(req: DiseaseDetailsRequest):
    return disease_details(req.disease_name)


# ---- Medical data ----------------------------------------------------------------
@app.get("/api/drug-search")
def drug_search(term: str = Query("")):
    return openfda.search_drug(term)


@app.post("/api/interactions")
def interactions(req: InteractionRequest):
    return openfda.check_interactions(req.drugs)


@app.post("/api/guidelines")
def guidelines(req: GuidelineRequest):
    return pubmed.search_guidelines(
        req.keywords,
        date_filter=req.date_filter,
        sort_by=req.sort_by,
        free_full_text_only=req.free_full_text_only,
        page=req.page,
    )


@app.get("/api/nutrition/search")
def nutrition_search(query: str = Query(""), pageSize: int = Query(20), page: int = Query(1)):
    return usda_fdc.search_foods(query, page_size=pageSize, page=page)


@app.get("/api/nutrition/food/{fdc_id}")
def nutrition_food(fdc_id: str):
    return usda_fdc.get_food(fdc_id)


@app.get("/api/news")
def news(limit: int = Query(15, ge=1, le=100)):
    return {"items": news_repo.list_latest_news(limit=limit)}


@app.post("/api/news/refresh")
def news_refresh():
    return news_repo.refresh_news()


# ---- Payments / CAPTCHA / Nucleus -------------------------------------------------
@app.post("/api/payments/transaction")
def payments_transaction(req: TransactionRequest):
    return payments.create_transaction(req.user_id, req.user_email, req.plan)


@app.post("/api/payments/webhook")
def payments_webhook(payload: Dict[str, Any] = Body(...)):
    return payments.handle_webhook(payload)


@app.post("/api/turnstile/verify")
def turnstile_verify(req: TurnstileRequest, request: Request):
    verify_turnstile(req.token, _client_ip(request))
    return {"success": True}


@app.post("/api/nucleus/submissions")
def nucleus_submission(req: NucleusSubmissionRequest, request: Request):
    return nucleus_repo.submit_idea(req.form_data, req.turnstile_token, _client_ip(request))
