"""
Pydantic schemas exchanged by the rule engine and the HTTP layer.
All models use Field() with descriptions so they document the API.
"""

from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from farmer_agent.models.domain import (
    ConversationContext,
    ConversationTurn,
    EntityBag,
    Intent,
)

Severity = Literal["low", "medium", "high"]


# --- Chat pipeline ---


class ContextDelta(BaseModel):
    """
    Proposed update to a ConversationContext, applied by the caller.
    Crop names may repeat ones already known; the merge de-duplicates.
    """

    known_crops: list[str] = Field(
        default_factory=list,
        description="Crop names extracted from the message, to append to known_crops",
    )

    model_config = ConfigDict(frozen=True)


class ComposedReply(BaseModel):
    """Reply text chosen for an intent plus the optional context proposal."""

    text: str = Field(description="Natural-language reply")
    context_delta: Optional[ContextDelta] = Field(
        default=None,
        description="Present exactly when crop entities were extracted",
    )

    model_config = ConfigDict(frozen=True)


class ChatTurnResult(BaseModel):
    """Outcome of processing one chat message through the rule engine."""

    intent: Intent
    entities: EntityBag = Field(default_factory=dict)
    reply: str
    suggestions: list[str]
    context_delta: Optional[ContextDelta] = None


# --- Diagnosis ---


class DiagnosisCandidate(BaseModel):
    """One ranked hypothesis about a crop ailment."""

    name: str = Field(description="Issue name, e.g. 'Powdery Mildew'")
    confidence: float = Field(ge=0.0, le=1.0, description="Rule confidence")
    solutions: list[str] = Field(default_factory=list)
    prevention: list[str] = Field(default_factory=list)
    severity: Severity
    ai_assisted: bool = Field(
        default=False,
        description="True when the candidate was boosted by an external image analysis",
    )


class ExternalAnalysis(BaseModel):
    """
    Crop/symptom detection produced by an image-classification collaborator.
    Overrides manually entered crop and symptoms when supplied.
    """

    crop_type: str = Field(
        min_length=1,
        validation_alias=AliasChoices("crop_type", "cropType"),
        description="Detected crop, e.g. 'Tomato'",
    )
    detected_symptoms: list[str] = Field(
        validation_alias=AliasChoices("detected_symptoms", "detectedSymptoms"),
        description="Detected symptom labels",
    )
    confidence: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Classifier confidence"
    )
    ai_processed: bool = True
    image_size: Optional[int] = Field(default=None, description="Image size in bytes")
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "crop_type": "Tomato",
                "detected_symptoms": ["Brown spots", "Yellowing leaves"],
                "confidence": 0.85,
            }
        }
    )


# --- Collaborator data ---


class ForecastDay(BaseModel):
    day: str
    temp: int
    condition: str
    humidity: Optional[int] = None


class WeatherSnapshot(BaseModel):
    """Current conditions for a location."""

    location: str
    temperature: int = Field(description="Degrees Celsius")
    humidity: int = Field(description="Relative humidity in percent")
    condition: str


class WeatherAlert(BaseModel):
    type: Literal["warning", "info"]
    message: str


class WeatherReport(WeatherSnapshot):
    """Current conditions plus forecast, alerts and farming advice."""

    wind_speed: int = Field(description="km/h")
    pressure: int = Field(description="hPa")
    visibility: int = Field(description="km")
    forecast: list[ForecastDay] = Field(default_factory=list)
    alerts: list[WeatherAlert] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class MarketQuote(BaseModel):
    """Indicative market price for a crop."""

    crop: str
    price: int
    unit: str
    category: str
    market: str
    currency: str = "INR"
    trend: Literal["up", "down", "stable"]
    last_updated: datetime


# --- Advisory ---


class SoilSample(BaseModel):
    """Soil test values entered by the farmer."""

    soil_type: Optional[str] = None
    ph: float = Field(ge=0.0, le=14.0)
    nitrogen: float = Field(ge=0.0, description="ppm")
    phosphorus: float = Field(ge=0.0, description="ppm")
    potassium: float = Field(ge=0.0, description="ppm")
    organic_matter: Optional[float] = Field(default=None, ge=0.0, description="percent")
    moisture: Optional[float] = None
    temperature: Optional[float] = None


class SoilRecommendation(BaseModel):
    type: Literal["warning", "info", "success"]
    title: str
    description: str
    priority: Literal["High", "Medium", "Low"]


class NutrientReading(BaseModel):
    nutrient: str
    value: float
    optimal: float
    unit: str


class SoilAnalysis(BaseModel):
    """Result of analysing a soil sample."""

    soil_type: Optional[str] = None
    health_score: int = Field(ge=0, le=100)
    recommendations: list[SoilRecommendation]
    summary: list[str] = Field(
        description="Short recommendations, one line each"
    )
    nutrients: list[NutrientReading]


class CropInfo(BaseModel):
    id: int
    name: str
    season: str
    duration: str
    water_needs: str


class FarmRecommendations(BaseModel):
    irrigation: str
    fertilization: str
    pest_control: str
    harvesting: str
    storage: str


# --- HTTP envelopes ---


class ChatRequest(BaseModel):
    message: str = Field(default="", description="Farmer's message")
    context: ConversationContext = Field(default_factory=ConversationContext)
    conversation_history: list[ConversationTurn] = Field(
        default_factory=list,
        validation_alias=AliasChoices("conversation_history", "conversationHistory"),
        description="Prior turns, oldest first",
    )


class ChatResponse(BaseModel):
    success: bool = True
    intent: Intent
    entities: EntityBag
    response: str
    suggestions: list[str]
    context_update: Optional[ContextDelta] = None
    context: ConversationContext
    weather_data: Optional[WeatherSnapshot] = None
    market_data: Optional[MarketQuote] = None
    offline: bool = False
    timestamp: datetime


class DiagnosisRequest(BaseModel):
    crop: str = ""
    symptoms: list[str] = Field(default_factory=list)
    external_analysis: Optional[Any] = Field(
        default=None,
        validation_alias=AliasChoices("external_analysis", "externalAnalysis"),
        description="Image analysis result; ignored when malformed",
    )


class DiagnosisResponse(BaseModel):
    success: bool = True
    crop: str
    candidates: list[DiagnosisCandidate]
    ai_assisted: bool
    analysis: Optional[ExternalAnalysis] = None
    offline: bool = False
    timestamp: datetime


class ImageAnalysisResponse(BaseModel):
    success: bool = True
    analysis: ExternalAnalysis


class AssistanceRequest(BaseModel):
    crop: Optional[str] = None
    soil_type: Optional[str] = None
    weather: Optional[str] = None
    issue: Optional[str] = None


class AssistanceResponse(BaseModel):
    success: bool = True
    recommendations: FarmRecommendations
    timestamp: datetime


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str


class CropsResponse(BaseModel):
    success: bool = True
    crops: list[CropInfo]


class SymptomsResponse(BaseModel):
    success: bool = True
    symptoms: list[str]


class WeatherResponse(BaseModel):
    success: bool = True
    data: WeatherReport


class SoilAnalysisResponse(BaseModel):
    success: bool = True
    analysis: SoilAnalysis
