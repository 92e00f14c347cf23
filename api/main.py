"""
Derigo API — Main Application

POST /classify         — Score a text on the four axes plus truthfulness
POST /classify/author  — Authenticity, coordination and intent for an author
POST /filter           — Filter decision for a result under given preferences
POST /analyze          — Full page pipeline (profiles, whitelist, cache)
GET  /sources/{domain} — Source reputation entry
GET  /health           — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import replace

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from derigo.analyzer import analyze_page
from derigo.author import classify_author, domain_author
from derigo.cache import result_cache
from derigo.config import settings
from derigo.filter import decide_filter_action
from derigo.llm.factory import get_provider
from derigo.logging import get_logger, setup_logging
from derigo.preferences import merge_preferences, profile_for_domain
from derigo.reference import reference_store
from derigo.schemas.api import (
    AnalyzeRequest,
    AnalyzeResponse,
    AuthorRequest,
    AuthorResponse,
    ClassificationResponse,
    ClassifyRequest,
    FilterRequest,
    FilterResponse,
    HealthResponse,
    SourceResponse,
)
from derigo.scorer import classify_content

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load reference tables on startup."""
    setup_logging()
    reference = await reference_store.get()
    logger.info(
        "Derigo API starting",
        extra={
            "keywords": len(reference.keywords),
            "sources": len(reference.sources),
            "known_actors": len(reference.known_actors),
        },
    )
    yield
    logger.info("Derigo API shutting down")


app = FastAPI(
    title="Derigo API",
    description="Rule-based political bias, credibility and author classification",
    version=f"{settings.API_VERSION} (engine {settings.ENGINE_VERSION})",
    lifespan=lifespan,
)

# Set DERIGO_CORS_ORIGINS to the extension origin in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions — return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error. The content could not be classified.",
        },
    )


# Lazy LLM provider
_llm = None
_llm_loaded = False


def _get_llm():
    global _llm, _llm_loaded
    if not _llm_loaded:
        _llm = get_provider(settings.LLM_PROVIDER)
        _llm_loaded = True
    return _llm


# ============================================================
# ROUTES
# ============================================================

@app.post("/classify", response_model=ClassificationResponse)
async def classify(request: ClassifyRequest):
    """Classify a text locally. The URL, if given, selects a source reputation."""
    reference = await reference_store.get()
    source = reference.source_for(request.url) if request.url else None
    result = classify_content(request.text, reference.keywords, source)

    if request.author is not None:
        author = request.author.to_author()
        actor = reference.known_actor_for(author.platform, author.identifier)
        result = replace(result, author=classify_author(author, request.text, actor))

    return ClassificationResponse.from_result(result)


@app.post("/classify/author", response_model=AuthorResponse)
async def classify_author_route(request: AuthorRequest):
    """Profile an author. Without one, the site behind `url` stands in."""
    reference = await reference_store.get()
    author = request.author.to_author() if request.author else domain_author(request.url)
    actor = reference.known_actor_for(author.platform, author.identifier)
    profile = classify_author(author, request.text, actor)
    return AuthorResponse.from_classification(profile)


@app.post("/filter", response_model=FilterResponse)
async def filter_result(request: FilterRequest):
    """Decide none/badge/overlay/block for a result under the given preferences."""
    prefs = request.preferences.to_preferences()
    profile = profile_for_domain(request.domain, prefs.site_profiles) if request.domain else None
    effective = merge_preferences(prefs, profile)
    action = decide_filter_action(request.result.to_result(time.time()), effective)
    return FilterResponse.from_action(action, profile)


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """Run the full page pipeline with the shared result cache."""
    start = time.time()
    reference = await reference_store.get()
    page = await analyze_page(
        request.text,
        request.url,
        reference=reference,
        preferences=request.preferences.to_preferences(),
        author=request.author.to_author() if request.author else None,
        cache=result_cache,
        provider=_get_llm(),
    )

    logger.info(
        f"Analyze complete: {page.skipped or page.action.action}",
        extra={
            "url": page.url,
            "domain": page.domain,
            "duration_ms": int((time.time() - start) * 1000),
        },
    )

    return AnalyzeResponse(
        url=page.url,
        domain=page.domain,
        analyzed=page.analyzed,
        skipped=page.skipped,
        cached=page.cached,
        profile=page.profile.name if page.profile else None,
        result=ClassificationResponse.from_result(page.result) if page.result else None,
        action=FilterResponse.from_action(page.action, page.profile) if page.action else None,
    )


@app.get("/sources/{domain}", response_model=SourceResponse)
async def get_source(domain: str):
    """Source reputation for a domain (www. is optional)."""
    reference = await reference_store.get()
    entry = reference.source_for(domain)
    if entry is None:
        raise HTTPException(404, f"No source entry for '{domain}'")
    return SourceResponse.from_entry(entry)


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    reference = await reference_store.get()
    return {
        "status": "operational",
        "engine_version": settings.ENGINE_VERSION,
        "keywords": len(reference.keywords),
        "sources": len(reference.sources),
        "known_actors": len(reference.known_actors),
        "llm_provider": settings.LLM_PROVIDER,
        "cache": result_cache.stats,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT)
