"""
Diagnosis service ranking candidate crop issues from observed symptoms.
Rules come from config/diagnosis_rules.yaml. Diagnosis never fails: unknown
symptoms and crops fall through to the "No strong match" candidate.
"""

from collections import abc
from functools import lru_cache
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, ValidationError

from farmer_agent import config
from farmer_agent.models.schemas import DiagnosisCandidate, ExternalAnalysis, Severity
from farmer_agent.utils.rules import load_table
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)


class SymptomRule(BaseModel):
    """One symptom -> issue rule."""

    symptom: str
    name: str
    base_confidence: float
    assisted_boost: float
    severity: Severity
    solutions: tuple[str, ...]
    prevention: tuple[str, ...]

    model_config = ConfigDict(frozen=True)


class CropAdjustment(BaseModel):
    """Flat confidence boost for issues a crop is prone to."""

    crop: str
    name_contains: tuple[str, ...]
    boost: float

    model_config = ConfigDict(frozen=True)


class FallbackCandidate(BaseModel):
    name: str
    confidence: float
    severity: Severity
    solutions: tuple[str, ...]
    prevention: tuple[str, ...]

    model_config = ConfigDict(frozen=True)


class DiagnosisRules(BaseModel):
    """Complete, immutable rule set for the diagnosis engine."""

    confidence_cap: float = config.CONFIDENCE_CAP
    symptoms: tuple[str, ...]
    rules: tuple[SymptomRule, ...]
    crop_adjustments: tuple[CropAdjustment, ...] = ()
    fallback: FallbackCandidate

    model_config = ConfigDict(frozen=True)


@lru_cache(maxsize=1)
def load_diagnosis_rules() -> DiagnosisRules:
    """Default rule set built from config/diagnosis_rules.yaml."""
    return DiagnosisRules.model_validate(load_table("diagnosis_rules"))


def _normalize(label: Any) -> str | None:
    if not isinstance(label, str):
        return None
    label = label.strip().lower()
    return label or None


def _observed_symptoms(symptoms: Any) -> set[str]:
    """Normalized symptom labels; a lone string counts as one label, a non-iterable as none."""
    if isinstance(symptoms, str):
        symptoms = [symptoms]
    elif not isinstance(symptoms, abc.Iterable):
        if symptoms is not None:
            logger.warning(
                "symptoms_ignored", reason="not_iterable", type=type(symptoms).__name__
            )
        symptoms = ()
    return {label for label in map(_normalize, symptoms) if label}


class DiagnosisService:
    """
    Stateless rule engine for the crop disease identifier.
    """

    def __init__(self, rules: DiagnosisRules | None = None):
        """
        Initialize diagnosis service.

        Args:
            rules: Rule set (defaults to config/diagnosis_rules.yaml)
        """
        self.rules = rules or load_diagnosis_rules()

    @property
    def symptom_vocabulary(self) -> list[str]:
        """Symptom labels a caller may offer for selection."""
        return list(self.rules.symptoms)

    def diagnose(
        self,
        crop: str | None,
        symptoms: Iterable[str] | None,
        external_analysis: ExternalAnalysis | dict | None = None,
    ) -> list[DiagnosisCandidate]:
        """
        Ranks candidate issues for a crop and its observed symptoms.

        A well-formed external analysis replaces crop and symptoms before the
        rules run and boosts every fired rule; a malformed one is ignored.

        Args:
            crop: Crop name entered by the farmer
            symptoms: Observed symptom labels
            external_analysis: Optional image-classification result

        Returns:
            Non-empty list sorted by descending confidence
        """
        analysis = self.coerce_analysis(external_analysis)
        assisted = analysis is not None
        if assisted:
            crop = analysis.crop_type
            symptoms = analysis.detected_symptoms

        observed = _observed_symptoms(symptoms)
        cap = self.rules.confidence_cap

        candidates = []
        for rule in self.rules.rules:
            if rule.symptom.lower() not in observed:
                continue
            confidence = rule.base_confidence
            if assisted:
                confidence = min(cap, round(confidence + rule.assisted_boost, 4))
            candidates.append(
                DiagnosisCandidate(
                    name=rule.name,
                    confidence=confidence,
                    solutions=list(rule.solutions),
                    prevention=list(rule.prevention),
                    severity=rule.severity,
                    ai_assisted=assisted,
                )
            )

        if not candidates:
            candidates.append(self._fallback())

        self._apply_crop_adjustments(_normalize(crop), candidates)

        ranked = sorted(candidates, key=lambda c: c.confidence, reverse=True)
        logger.info(
            "diagnosis_completed",
            crop=crop,
            symptoms=sorted(observed),
            ai_assisted=assisted,
            top=ranked[0].name,
            top_confidence=ranked[0].confidence,
        )
        return ranked

    def _apply_crop_adjustments(
        self, crop: str | None, candidates: list[DiagnosisCandidate]
    ) -> None:
        if crop is None:
            return
        cap = self.rules.confidence_cap
        for adjustment in self.rules.crop_adjustments:
            if adjustment.crop.lower() != crop:
                continue
            for candidate in candidates:
                name = candidate.name.lower()
                if any(fragment in name for fragment in adjustment.name_contains):
                    candidate.confidence = min(
                        cap, round(candidate.confidence + adjustment.boost, 4)
                    )

    def _fallback(self) -> DiagnosisCandidate:
        fallback = self.rules.fallback
        return DiagnosisCandidate(
            name=fallback.name,
            confidence=fallback.confidence,
            solutions=list(fallback.solutions),
            prevention=list(fallback.prevention),
            severity=fallback.severity,
            ai_assisted=False,
        )

    @staticmethod
    def coerce_analysis(
        external_analysis: Any,
    ) -> ExternalAnalysis | None:
        """
        Validates an external analysis, treating anything malformed as absent.
        """
        if external_analysis is None or isinstance(external_analysis, ExternalAnalysis):
            return external_analysis
        if not isinstance(external_analysis, dict):
            logger.warning(
                "external_analysis_ignored",
                reason="unsupported_type",
                type=type(external_analysis).__name__,
            )
            return None
        try:
            return ExternalAnalysis.model_validate(external_analysis)
        except ValidationError as e:
            logger.warning(
                "external_analysis_ignored",
                reason="malformed",
                errors=e.error_count(),
            )
            return None


def diagnose(
    crop: str | None,
    symptoms: Iterable[str] | None,
    external_analysis: ExternalAnalysis | dict | None = None,
) -> list[DiagnosisCandidate]:
    """Diagnoses with the default rule set."""
    return DiagnosisService().diagnose(crop, symptoms, external_analysis)
