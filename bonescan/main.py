"""
BoneScan AI - FastAPI Application

API entry point for:
- Scan analysis (inline base64 or multipart upload)
- PDF report download for a finished analysis
- Health and rule-table introspection

Run:
    uvicorn bonescan.main:app --reload --port 8000
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from bonescan.config import APP_VERSION, get_settings
from bonescan.core.llm import create_vision_client
from bonescan.models import AnalysisRecord, AnalyzeRequest, ErrorResponse, HealthResponse, ReportRequest
from bonescan.services import AnalysisService, decode_base64_image
from bonescan.utils import (
    get_logger,
    setup_logging,
    BoneScanError,
    InputError,
    UpstreamTransientError,
    ValidationError,
)

logger = get_logger(__name__)

START_TIME = datetime.now()

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 402, 429, 500, 502)
}


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    logger.info(
        f"BoneScan AI {APP_VERSION} starting (policy={settings.policy.value}, "
        f"provider={settings.vision_provider})"
    )
    yield
    logger.info("BoneScan AI API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="BoneScan AI API",
    description="X-ray fracture analysis with deterministic specialist routing and PDF reports",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Dependencies ----

def get_analysis_service(request: Request) -> AnalysisService:
    """One service per process, built from settings on first use."""
    service = getattr(request.app.state, "analysis_service", None)
    if service is None:
        settings = get_settings()
        service = AnalysisService(create_vision_client(settings), policy=settings.policy)
        request.app.state.analysis_service = service
    return service


# ---- Error Handling ----

@app.exception_handler(BoneScanError)
async def bonescan_error_handler(request: Request, exc: BoneScanError) -> JSONResponse:
    headers = {}
    if isinstance(exc, UpstreamTransientError) and exc.retry_after is not None:
        headers["Retry-After"] = str(int(exc.retry_after))
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict(), headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=BoneScanError("Analysis failed", code="ANALYSIS_FAILED").to_dict(),
    )


async def _run_analysis(service: AnalysisService, image: bytes, mime_type: str) -> AnalysisRecord:
    try:
        return await service.analyze(image, mime_type)
    except BoneScanError:
        raise
    except Exception as e:
        logger.error(f"analyze-scan error: {e}", exc_info=True)
        raise BoneScanError("Analysis failed", code="ANALYSIS_FAILED") from e


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        policy=settings.policy.value,
        provider=settings.vision_provider,
    )


@app.get("/api/v1/rules", tags=["Reference"])
async def list_rules(service: AnalysisService = Depends(get_analysis_service)):
    """Active policy and specialist routing table, in priority order."""
    return service.rule_engine.describe()


@app.post(
    "/api/v1/analyze",
    response_model=AnalysisRecord,
    responses=_ERROR_RESPONSES,
    tags=["Analysis"],
)
async def analyze_scan(
    request: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze an inline base64 X-ray image.
    """
    image = decode_base64_image(request.image_base64)
    return await _run_analysis(service, image, request.mime_type)


@app.post(
    "/api/v1/analyze/upload",
    response_model=AnalysisRecord,
    responses=_ERROR_RESPONSES,
    tags=["Analysis"],
)
async def analyze_upload(
    file: UploadFile = File(...),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze an uploaded X-ray image file.
    """
    image = await file.read()
    return await _run_analysis(service, image, file.content_type)


@app.post(
    "/api/v1/reports",
    responses={200: {"content": {"application/pdf": {}}}, **_ERROR_RESPONSES},
    tags=["Reports"],
)
async def download_report(
    request: ReportRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Render the PDF report for a finished analysis.
    """
    try:
        record = service.validator.validate(request.result)
    except ValidationError as e:
        raise InputError(f"Invalid analysis result: {e.message}") from e

    record = service.rule_engine.apply(record)
    report = service.render_report(record, request.image_base64)

    return Response(
        content=report.pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{report.filename}"',
            "X-Report-ID": report.report_id,
        },
    )
