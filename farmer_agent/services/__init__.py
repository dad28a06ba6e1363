"""
Services package exports for the rule engine and its collaborators.
"""

from farmer_agent.services.lexicon import Lexicon, LexiconError, load_lexicon
from farmer_agent.services.classifier_service import ClassifierService, classify
from farmer_agent.services.response_service import ResponseService
from farmer_agent.services.suggestion_service import suggestions_for
from farmer_agent.services.context_service import ContextService
from farmer_agent.services.assistant_service import AssistantService, process_chat_turn
from farmer_agent.services.diagnosis_service import (
    DiagnosisService,
    DiagnosisRules,
    load_diagnosis_rules,
    diagnose,
)
from farmer_agent.services.advisory_service import (
    analyze_soil,
    soil_recommendations,
    weather_recommendations,
    farm_recommendations,
    crop_catalog,
)
from farmer_agent.services.collaborator_service import (
    CollaboratorService,
    CollaboratorError,
    CollaboratorTimeoutError,
    InvalidImageError,
    WeatherProvider,
    MarketProvider,
    ImageAnalyzer,
)

__all__ = [
    "Lexicon",
    "LexiconError",
    "load_lexicon",
    "ClassifierService",
    "classify",
    "ResponseService",
    "suggestions_for",
    "ContextService",
    "AssistantService",
    "process_chat_turn",
    "DiagnosisService",
    "DiagnosisRules",
    "load_diagnosis_rules",
    "diagnose",
    "analyze_soil",
    "soil_recommendations",
    "weather_recommendations",
    "farm_recommendations",
    "crop_catalog",
    "CollaboratorService",
    "CollaboratorError",
    "CollaboratorTimeoutError",
    "InvalidImageError",
    "WeatherProvider",
    "MarketProvider",
    "ImageAnalyzer",
]
