from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docqa.api.middleware import RequestLoggingMiddleware, UploadSizeLimitMiddleware
from docqa.api.routes import ask
from docqa.config import settings
from docqa.errors import DocQAError, normalize_error
from docqa.llm.client import build_completion_client
from docqa.models.schemas import HealthResponse
from docqa.pipeline.orchestrator import AskPipeline

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the shared completion client and pipeline; refuse to start without a credential."""
    logger.info("starting_up", app=settings.app_name, version=settings.app_version)

    # ── Startup ──────────────────────────────────────────
    client = build_completion_client(settings)
    app.state.pipeline = AskPipeline(
        client,
        max_upload_bytes=settings.max_upload_bytes,
        default_model=settings.default_model,
    )
    logger.info(
        "completion_client_ready",
        base_url=settings.openai_base_url,
        default_model=settings.default_model,
        max_upload_mb=settings.max_upload_mb,
    )

    logger.info("startup_complete")
    yield

    # ── Shutdown ─────────────────────────────────────────
    logger.info("shutting_down")
    await client.aclose()
    logger.info("shutdown_complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Ask a question about a Markdown or plain-text document.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Middleware ────────────────────────────────────────────
# Order matters: outermost middleware runs first on request, last on response.

app.add_middleware(
    UploadSizeLimitMiddleware,
    max_bytes=settings.max_upload_bytes,
    paths=frozenset({"/ask"}),
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Exception Handlers ───────────────────────────────────

@app.exception_handler(DocQAError)
async def docqa_exception_handler(request: Request, exc: DocQAError) -> JSONResponse:
    error = normalize_error(exc, debug=settings.debug)
    log = logger.info if error.client_fault else logger.error
    log(
        "ask_failed",
        path=request.url.path,
        kind=error.kind,
        status_code=error.status_code,
        error=error.message,
    )
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted(
        {".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()}
    )
    logger.info(
        "request_malformed",
        path=request.url.path,
        fields=fields,
        errors=[err.get("msg") for err in exc.errors()],
    )
    message = f"malformed request: {', '.join(fields)}" if fields else "malformed request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, error=str(exc))
    error = normalize_error(exc, debug=settings.debug)
    return JSONResponse(status_code=error.status_code, content=error.to_body())


# ── Health Check ─────────────────────────────────────────

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    return HealthResponse(app=settings.app_name, version=settings.app_version)


# ── Routers ──────────────────────────────────────────────

app.include_router(ask.router, tags=["Ask"])


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("docqa.main:app", host=settings.host, port=settings.port)
