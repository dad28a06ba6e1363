"""
HTTP API exposing the assistant, the disease identifier and the data stubs.
Every response uses the {"success": ...} envelope.
"""

import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

from fastapi import (
    APIRouter,
    Depends,
    FastAPI,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn
from langchain_core.messages import AIMessage, HumanMessage

from farmer_agent import config
from farmer_agent.graph.builder import build_graph
from farmer_agent.models.schemas import (
    AssistanceRequest,
    AssistanceResponse,
    ChatRequest,
    ChatResponse,
    ContextDelta,
    CropsResponse,
    DiagnosisRequest,
    DiagnosisResponse,
    ErrorResponse,
    ExternalAnalysis,
    HealthResponse,
    ImageAnalysisResponse,
    SoilAnalysisResponse,
    SoilSample,
    SymptomsResponse,
    WeatherResponse,
)
from farmer_agent.services.advisory_service import (
    analyze_soil,
    crop_catalog,
    farm_recommendations,
)
from farmer_agent.services.collaborator_service import (
    CollaboratorError,
    CollaboratorService,
    ImageAnalyzer,
    InvalidImageError,
    WeatherProvider,
)
from farmer_agent.services.diagnosis_service import DiagnosisService
from farmer_agent.utils.logger import configure_logging, get_logger, set_conversation_id

logger = get_logger(__name__)

router = APIRouter()


# --- Dependencies ---


@lru_cache(maxsize=1)
def get_chat_graph():
    return build_graph(with_checkpointer=False)


@lru_cache(maxsize=1)
def get_collaborator_service() -> CollaboratorService:
    return CollaboratorService()


@lru_cache(maxsize=1)
def get_diagnosis_service() -> DiagnosisService:
    return DiagnosisService()


@lru_cache(maxsize=1)
def get_weather_provider() -> WeatherProvider:
    return WeatherProvider()


@lru_cache(maxsize=1)
def get_image_analyzer() -> ImageAnalyzer:
    return ImageAnalyzer()


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _read_image(image: Optional[UploadFile]) -> bytes:
    """Reads an upload, enforcing presence, content type and size limit."""
    if image is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "No image file provided")
    if not (image.content_type or "").startswith("image/"):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Only image files are allowed")

    data = await image.read()
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Image exceeds {config.MAX_UPLOAD_BYTES} bytes",
        )
    if not data:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "No image file provided")
    return data


# --- Routes ---


@router.get("/health", response_model=HealthResponse)
async def health_check() -> Any:
    return HealthResponse(message="Farmer Agent API is running!")


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse, "description": "Missing message"}},
)
async def chat(request: ChatRequest, graph=Depends(get_chat_graph)) -> Any:
    """
    Answers a farmer's message with the rule-based assistant.

    - **message**: Farmer's message (required)
    - **context**: Conversation context held by the client
    - **conversation_history**: Prior turns, oldest first

    Weather and market data are attached when the intent asks for them. When
    those services fail the reply is still returned with `offline` set.
    """
    if not request.message.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Message is required")

    set_conversation_id(str(uuid.uuid4()))
    messages = [
        HumanMessage(content=turn.text) if turn.speaker == "user" else AIMessage(content=turn.text)
        for turn in request.conversation_history
    ]
    messages.append(HumanMessage(content=request.message))

    try:
        result = await graph.ainvoke({"messages": messages, "context": request.context})
    except Exception as e:
        logger.error("chat_failed", exc_info=True, error=str(e))
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process chat message"
        ) from e

    delta = result.get("context_delta")
    return ChatResponse(
        intent=result["intent"],
        entities=result["entities"],
        response=str(result["messages"][-1].content),
        suggestions=result["suggestions"],
        context_update=ContextDelta.model_validate(delta) if delta else None,
        context=result["context"],
        weather_data=result.get("weather_data"),
        market_data=result.get("market_data"),
        offline=result.get("offline", False),
        timestamp=_now(),
    )


@router.get("/symptoms", response_model=SymptomsResponse)
async def list_symptoms(service: DiagnosisService = Depends(get_diagnosis_service)) -> Any:
    return SymptomsResponse(symptoms=service.symptom_vocabulary)


@router.post("/diagnose", response_model=DiagnosisResponse)
async def diagnose(
    request: DiagnosisRequest,
    service: DiagnosisService = Depends(get_diagnosis_service),
) -> Any:
    """
    Ranks likely issues for a crop from selected symptoms.
    A valid `external_analysis` overrides the crop and symptoms.
    """
    analysis = service.coerce_analysis(request.external_analysis)
    candidates = service.diagnose(request.crop, request.symptoms, analysis)
    return DiagnosisResponse(
        crop=analysis.crop_type if analysis else request.crop,
        candidates=candidates,
        ai_assisted=any(c.ai_assisted for c in candidates),
        analysis=analysis,
        timestamp=_now(),
    )


@router.post(
    "/diagnose-image",
    response_model=DiagnosisResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid upload"}},
)
async def diagnose_image(
    image: Optional[UploadFile] = File(None),
    crop: str = Form(""),
    symptoms: list[str] = Form([]),
    service: DiagnosisService = Depends(get_diagnosis_service),
    analyzer: ImageAnalyzer = Depends(get_image_analyzer),
    collaborator: CollaboratorService = Depends(get_collaborator_service),
) -> Any:
    """
    Photo mode: analyses the image, then diagnoses with the detected values.
    If image analysis fails, falls back to the manually entered crop and
    symptoms and flags the response as offline.
    """
    data = await _read_image(image)

    analysis: Optional[ExternalAnalysis] = None
    offline = False
    try:
        analysis = await collaborator.call(
            "image_analysis", analyzer.analyze, data, image.content_type
        )
    except InvalidImageError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e)) from e
    except CollaboratorError as e:
        logger.warning("image_analysis_unavailable", error=str(e), fallback="manual_rules")
        offline = True

    candidates = service.diagnose(crop, symptoms, analysis)
    return DiagnosisResponse(
        crop=analysis.crop_type if analysis else crop,
        candidates=candidates,
        ai_assisted=any(c.ai_assisted for c in candidates),
        analysis=analysis,
        offline=offline,
        timestamp=_now(),
    )


@router.post(
    "/analyze-image",
    response_model=ImageAnalysisResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid upload"},
        413: {"model": ErrorResponse, "description": "Image too large"},
    },
)
async def analyze_image(
    image: Optional[UploadFile] = File(None),
    analyzer: ImageAnalyzer = Depends(get_image_analyzer),
    collaborator: CollaboratorService = Depends(get_collaborator_service),
) -> Any:
    """Detects crop type and symptoms in an uploaded photo."""
    data = await _read_image(image)
    try:
        analysis = await collaborator.call(
            "image_analysis", analyzer.analyze, data, image.content_type
        )
    except InvalidImageError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e)) from e
    except CollaboratorError as e:
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to analyze image with AI"
        ) from e
    return ImageAnalysisResponse(analysis=analysis)


@router.get("/weather/{location}", response_model=WeatherResponse)
async def weather(
    location: str,
    provider: WeatherProvider = Depends(get_weather_provider),
    collaborator: CollaboratorService = Depends(get_collaborator_service),
) -> Any:
    """Current weather, forecast and farming advice for a location."""
    try:
        report = await collaborator.call("weather", provider.report, location)
    except CollaboratorError as e:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Weather service unavailable"
        ) from e
    return WeatherResponse(data=report)


@router.get("/crops", response_model=CropsResponse)
async def crops() -> Any:
    return CropsResponse(crops=crop_catalog())


@router.post("/soil-analysis", response_model=SoilAnalysisResponse)
async def soil_analysis(sample: SoilSample) -> Any:
    """Scores a soil test and recommends amendments."""
    return SoilAnalysisResponse(analysis=analyze_soil(sample))


@router.post("/assistance", response_model=AssistanceResponse)
async def assistance(request: AssistanceRequest) -> Any:
    """General practice recommendations for a crop and its conditions."""
    recommendations = farm_recommendations(
        crop=request.crop,
        soil_type=request.soil_type,
        weather=request.weather,
        issue=request.issue,
    )
    return AssistanceResponse(recommendations=recommendations, timestamp=_now())


# --- Application ---


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reports the first invalid field of a malformed request in the error envelope."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))

    logger.warning("request_validation_failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(error=message).model_dump(),
    )


def create_app() -> FastAPI:
    """Builds the FastAPI application with logging configured."""
    settings = config.get_settings()
    configure_logging(level=settings.log_level, use_structured=settings.structured_logs)

    application = FastAPI(title=settings.api_title, version=settings.api_version)
    application.include_router(router, prefix="/api")
    application.add_exception_handler(HTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    return application


app = create_app()


def run() -> None:
    """Console entry point serving the API with uvicorn."""
    settings = config.get_settings()
    logger.info("api_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
