"""
Advisory rules for soil tests, weather conditions and general farm practice.
Plain threshold rules, no I/O.
"""

from farmer_agent.models.schemas import (
    CropInfo,
    FarmRecommendations,
    NutrientReading,
    SoilAnalysis,
    SoilRecommendation,
    SoilSample,
    WeatherReport,
)
from farmer_agent.utils.rules import frozen_table
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)

PH_MIN = 6.0
PH_MAX = 7.5
NITROGEN_MIN = 50
PHOSPHORUS_MIN = 30
POTASSIUM_MIN = 40
ORGANIC_MATTER_MIN = 2
ORGANIC_MATTER_OPTIMAL = 3


def soil_recommendations(
    ph: float, nitrogen: float, phosphorus: float, potassium: float
) -> list[str]:
    """
    One-line amendments for a soil test.

    Returns:
        Amendments in pH, N, P, K order, or a single "optimal" line
    """
    recommendations = []

    if ph < PH_MIN:
        recommendations.append("Add lime to increase soil pH")
    elif ph > PH_MAX:
        recommendations.append("Add sulfur to decrease soil pH")

    if nitrogen < NITROGEN_MIN:
        recommendations.append("Apply nitrogen-rich fertilizer")
    if phosphorus < PHOSPHORUS_MIN:
        recommendations.append("Add phosphorus fertilizer")
    if potassium < POTASSIUM_MIN:
        recommendations.append("Apply potassium fertilizer")

    return recommendations or ["Soil conditions are optimal for most crops"]


def soil_health_score(sample: SoilSample) -> int:
    """Score out of 100, reduced for each out-of-range reading."""
    score = 100
    if sample.ph < PH_MIN or sample.ph > PH_MAX:
        score -= 20
    if sample.nitrogen < NITROGEN_MIN:
        score -= 15
    if sample.phosphorus < PHOSPHORUS_MIN:
        score -= 15
    if sample.potassium < POTASSIUM_MIN:
        score -= 15
    if sample.organic_matter is not None and sample.organic_matter < ORGANIC_MATTER_MIN:
        score -= 10
    return max(0, score)


def analyze_soil(sample: SoilSample) -> SoilAnalysis:
    """
    Health score, prioritized recommendations and nutrient readings for a sample.
    Organic matter rules only apply when it was measured.
    """
    detailed = []

    if sample.ph < PH_MIN:
        detailed.append(
            SoilRecommendation(
                type="warning",
                title="Low pH (Acidic Soil)",
                description="Add lime to increase soil pH. Apply 2-4 tons per acre of agricultural lime.",
                priority="High",
            )
        )
    elif sample.ph > PH_MAX:
        detailed.append(
            SoilRecommendation(
                type="warning",
                title="High pH (Alkaline Soil)",
                description="Add sulfur to decrease soil pH. Apply 1-2 tons per acre of elemental sulfur.",
                priority="Medium",
            )
        )

    if sample.nitrogen < NITROGEN_MIN:
        detailed.append(
            SoilRecommendation(
                type="warning",
                title="Low Nitrogen",
                description="Apply nitrogen-rich fertilizer. Consider organic options like compost or manure.",
                priority="High",
            )
        )
    if sample.phosphorus < PHOSPHORUS_MIN:
        detailed.append(
            SoilRecommendation(
                type="warning",
                title="Low Phosphorus",
                description="Apply phosphorus fertilizer. Bone meal is a good organic option.",
                priority="Medium",
            )
        )
    if sample.potassium < POTASSIUM_MIN:
        detailed.append(
            SoilRecommendation(
                type="warning",
                title="Low Potassium",
                description="Apply potassium fertilizer. Wood ash is a natural source of potassium.",
                priority="Medium",
            )
        )
    if sample.organic_matter is not None and sample.organic_matter < ORGANIC_MATTER_MIN:
        detailed.append(
            SoilRecommendation(
                type="info",
                title="Low Organic Matter",
                description="Add organic matter through compost, manure, or cover crops.",
                priority="Medium",
            )
        )

    if not detailed:
        detailed.append(
            SoilRecommendation(
                type="success",
                title="Optimal Soil Conditions",
                description="Your soil is in excellent condition for most crops.",
                priority="Low",
            )
        )

    nutrients = [
        NutrientReading(nutrient="Nitrogen", value=sample.nitrogen, optimal=NITROGEN_MIN, unit="ppm"),
        NutrientReading(nutrient="Phosphorus", value=sample.phosphorus, optimal=PHOSPHORUS_MIN, unit="ppm"),
        NutrientReading(nutrient="Potassium", value=sample.potassium, optimal=POTASSIUM_MIN, unit="ppm"),
    ]
    if sample.organic_matter is not None:
        nutrients.append(
            NutrientReading(
                nutrient="Organic Matter",
                value=sample.organic_matter,
                optimal=ORGANIC_MATTER_OPTIMAL,
                unit="%",
            )
        )

    analysis = SoilAnalysis(
        soil_type=sample.soil_type,
        health_score=soil_health_score(sample),
        recommendations=detailed,
        summary=soil_recommendations(
            sample.ph, sample.nitrogen, sample.phosphorus, sample.potassium
        ),
        nutrients=nutrients,
    )
    logger.info(
        "soil_analyzed",
        soil_type=sample.soil_type,
        health_score=analysis.health_score,
        recommendations=len(detailed),
    )
    return analysis


def weather_recommendations(report: WeatherReport) -> list[str]:
    """Farming actions suggested by current conditions and the forecast."""
    recommendations = []

    if report.temperature > 30:
        recommendations.append("Increase irrigation frequency due to high temperatures")
    if report.humidity > 80:
        recommendations.append("Monitor for fungal diseases in high humidity")
    if report.wind_speed > 15:
        recommendations.append("Protect crops from strong winds")
    if any(day.condition == "Rainy" for day in report.forecast):
        recommendations.append("Prepare for rainfall - avoid spraying pesticides")

    return recommendations or ["Weather conditions are optimal for farming activities"]


def farm_recommendations(
    crop: str | None = None,
    soil_type: str | None = None,
    weather: str | None = None,
    issue: str | None = None,
) -> FarmRecommendations:
    """
    Baseline practice advice, adjusted for dry weather and pest issues.
    Crop and soil type are accepted for logging only.
    """
    recommendations = FarmRecommendations(
        irrigation="Maintain regular irrigation schedule based on weather conditions.",
        fertilization="Apply balanced fertilizer with NPK ratio 10:26:26.",
        pest_control="Monitor for common pests and apply organic pesticides if needed.",
        harvesting="Harvest when crop shows optimal maturity indicators.",
        storage="Store in cool, dry conditions to prevent spoilage.",
    )

    if weather == "dry":
        recommendations.irrigation = (
            "Increase irrigation frequency. Consider drip irrigation for water efficiency."
        )
    if issue == "pest":
        recommendations.pest_control = (
            "Apply neem-based organic pesticide. Monitor daily for pest activity."
        )

    logger.info(
        "farm_recommendations_generated",
        crop=crop,
        soil_type=soil_type,
        weather=weather,
        issue=issue,
    )
    return recommendations


def crop_catalog() -> list[CropInfo]:
    """Reference crops with season, duration and water needs."""
    return [CropInfo(**crop) for crop in frozen_table("catalog")["crops"]]
