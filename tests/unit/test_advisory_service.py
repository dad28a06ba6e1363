"""
Unit tests for the advisory rules (soil, weather, farm practice, crop catalog).
"""

import pytest

from farmer_agent.models.schemas import ForecastDay, SoilSample, WeatherReport
from farmer_agent.services.advisory_service import (
    analyze_soil,
    crop_catalog,
    farm_recommendations,
    soil_health_score,
    soil_recommendations,
    weather_recommendations,
)


def _report(**overrides) -> WeatherReport:
    values = {
        "location": "Pune",
        "temperature": 25,
        "humidity": 50,
        "condition": "Sunny",
        "wind_speed": 10,
        "pressure": 1012,
        "visibility": 10,
        "forecast": [ForecastDay(day="Today", temp=25, condition="Sunny")],
    }
    values.update(overrides)
    return WeatherReport(**values)


class TestSoilRecommendations:
    """Tests for the short soil amendment list."""

    def test_optimal_soil(self):
        """Should report optimal conditions when every value is in range."""
        # Act
        recommendations = soil_recommendations(6.5, 60, 40, 50)

        # Assert
        assert recommendations == ["Soil conditions are optimal for most crops"]

    def test_acidic_and_deficient_soil(self):
        """Should list amendments in pH, N, P, K order."""
        # Act
        recommendations = soil_recommendations(5.2, 20, 10, 15)

        # Assert
        assert recommendations == [
            "Add lime to increase soil pH",
            "Apply nitrogen-rich fertilizer",
            "Add phosphorus fertilizer",
            "Apply potassium fertilizer",
        ]

    def test_alkaline_soil(self):
        """Should recommend sulfur above pH 7.5."""
        # Act
        recommendations = soil_recommendations(8.1, 60, 40, 50)

        # Assert
        assert recommendations == ["Add sulfur to decrease soil pH"]

    def test_boundaries_are_in_range(self):
        """Should treat threshold values themselves as adequate."""
        # Act
        recommendations = soil_recommendations(6.0, 50, 30, 40)

        # Assert
        assert recommendations == ["Soil conditions are optimal for most crops"]


class TestAnalyzeSoil:
    """Tests for the full soil analysis."""

    def test_healthy_sample(self):
        """Should score 100 with a single success recommendation."""
        # Arrange
        sample = SoilSample(soil_type="loamy", ph=6.8, nitrogen=70, phosphorus=45, potassium=60)

        # Act
        analysis = analyze_soil(sample)

        # Assert
        assert analysis.health_score == 100
        assert [r.title for r in analysis.recommendations] == ["Optimal Soil Conditions"]
        assert [n.nutrient for n in analysis.nutrients] == ["Nitrogen", "Phosphorus", "Potassium"]

    def test_poor_sample(self):
        """Should deduct for every out-of-range reading."""
        # Arrange
        sample = SoilSample(
            ph=5.0, nitrogen=10, phosphorus=5, potassium=5, organic_matter=1.0
        )

        # Act
        analysis = analyze_soil(sample)

        # Assert
        assert analysis.health_score == 25
        assert [r.title for r in analysis.recommendations] == [
            "Low pH (Acidic Soil)",
            "Low Nitrogen",
            "Low Phosphorus",
            "Low Potassium",
            "Low Organic Matter",
        ]
        assert analysis.recommendations[0].priority == "High"
        assert analysis.nutrients[-1].nutrient == "Organic Matter"
        assert len(analysis.summary) == 4

    def test_unmeasured_organic_matter_not_penalized(self):
        """Should skip organic matter rules when it was not measured."""
        # Arrange
        sample = SoilSample(ph=7.0, nitrogen=60, phosphorus=40, potassium=50)

        # Act
        score = soil_health_score(sample)

        # Assert
        assert score == 100

    def test_invalid_ph_rejected(self):
        """Should validate pH range on the sample."""
        # Act & Assert
        with pytest.raises(ValueError):
            SoilSample(ph=15, nitrogen=1, phosphorus=1, potassium=1)


class TestWeatherRecommendations:
    """Tests for weather-driven advice."""

    def test_optimal_weather(self):
        """Should return the default message for mild conditions."""
        # Act
        recommendations = weather_recommendations(_report())

        # Assert
        assert recommendations == ["Weather conditions are optimal for farming activities"]

    def test_harsh_weather(self):
        """Should combine heat, humidity, wind and rain advice."""
        # Arrange
        report = _report(
            temperature=35,
            humidity=85,
            wind_speed=20,
            forecast=[ForecastDay(day="Day 3", temp=28, condition="Rainy")],
        )

        # Act
        recommendations = weather_recommendations(report)

        # Assert
        assert recommendations == [
            "Increase irrigation frequency due to high temperatures",
            "Monitor for fungal diseases in high humidity",
            "Protect crops from strong winds",
            "Prepare for rainfall - avoid spraying pesticides",
        ]


class TestFarmRecommendations:
    """Tests for general practice advice."""

    def test_baseline(self):
        """Should return baseline advice for every practice area."""
        # Act
        recommendations = farm_recommendations(crop="wheat")

        # Assert
        assert recommendations.fertilization == "Apply balanced fertilizer with NPK ratio 10:26:26."
        assert recommendations.irrigation.startswith("Maintain regular irrigation")

    def test_dry_weather_and_pest_issue(self):
        """Should override irrigation and pest control advice."""
        # Act
        recommendations = farm_recommendations(weather="dry", issue="pest")

        # Assert
        assert "drip irrigation" in recommendations.irrigation
        assert "neem-based" in recommendations.pest_control


class TestCropCatalog:
    """Tests for the reference crop list."""

    def test_catalog_entries(self):
        """Should list six crops with growing details."""
        # Act
        crops = crop_catalog()

        # Assert
        assert len(crops) == 6
        assert crops[1].name == "Rice"
        assert crops[1].water_needs == "High"
