"""
Collaborator layer for the weather, market and image-analysis data sources.
The providers are stubs with injectable randomness; CollaboratorService adds
timeout, rate limiting and retry around any of their calls.
"""

import asyncio
import random
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from farmer_agent import config
from farmer_agent.models.schemas import (
    ExternalAnalysis,
    ForecastDay,
    MarketQuote,
    WeatherAlert,
    WeatherReport,
    WeatherSnapshot,
)
from farmer_agent.services.advisory_service import weather_recommendations
from farmer_agent.utils.rules import frozen_table
from farmer_agent.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

FORECAST_DAYS = (
    ("Today", "Sunny", 65),
    ("Tomorrow", "Cloudy", 70),
    ("Day 3", "Rainy", 85),
    ("Day 4", "Partly Cloudy", 60),
    ("Day 5", "Sunny", 55),
)


class CollaboratorError(Exception):
    """Base exception for failed collaborator calls."""


class CollaboratorTimeoutError(CollaboratorError):
    """Raised when a collaborator call exceeds its timeout."""


class InvalidImageError(ValueError):
    """Raised when an upload is not an analysable image. Never retried."""


class CollaboratorService:
    """
    Async guard for collaborator calls with timeout, rate limiting and retry.
    """

    def __init__(
        self,
        max_retries: int = config.COLLABORATOR_MAX_RETRIES,
        timeout: float = config.COLLABORATOR_TIMEOUT,
        rate_limit: int = config.COLLABORATOR_RATE_LIMIT,
        backoff: float = 1.0,
    ):
        """
        Initialize collaborator guard.

        Args:
            max_retries: Maximum attempts per call
            timeout: Timeout in seconds for each attempt
            rate_limit: Maximum concurrent calls (Semaphore)
            backoff: Multiplier of the exponential wait between attempts
        """
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff = backoff
        self.semaphore = asyncio.Semaphore(rate_limit)

    async def call(
        self,
        name: str,
        func: Callable[..., Awaitable[T]],
        *args,
        timeout: float | None = None,
        **kwargs,
    ) -> T:
        """
        Awaits func(*args, **kwargs) with retry, timeout and rate limiting.

        Args:
            name: Collaborator name used in logs (e.g. "weather")
            func: Coroutine function to call
            timeout: Override default timeout (seconds)

        Returns:
            Whatever func returns

        Raises:
            CollaboratorTimeoutError: If the last attempt timed out
            CollaboratorError: If every attempt failed
            InvalidImageError: Immediately, for bad uploads
        """
        timeout = timeout or self.timeout
        start_time = time.time()

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff, max=10),
            retry=retry_if_exception_type(CollaboratorError),
            reraise=True,
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                try:
                    logger.info(
                        "collaborator_call_started",
                        collaborator=name,
                        attempt=attempt_number,
                        timeout=timeout,
                    )

                    async with self.semaphore:
                        result = await asyncio.wait_for(
                            func(*args, **kwargs), timeout=timeout
                        )

                    logger.info(
                        "collaborator_call_completed",
                        collaborator=name,
                        elapsed=time.time() - start_time,
                    )
                    return result

                except InvalidImageError:
                    raise
                except asyncio.TimeoutError as e:
                    logger.error(
                        "collaborator_call_timeout",
                        collaborator=name,
                        elapsed=time.time() - start_time,
                        timeout=timeout,
                        attempt=attempt_number,
                    )
                    raise CollaboratorTimeoutError(
                        f"{name} call exceeded timeout of {timeout}s"
                    ) from e
                except CollaboratorError:
                    raise
                except Exception as e:
                    logger.error(
                        "collaborator_call_failed",
                        exc_info=True,
                        collaborator=name,
                        elapsed=time.time() - start_time,
                        attempt=attempt_number,
                        error=str(e),
                    )
                    raise CollaboratorError(f"{name} call failed: {e}") from e


class _StubProvider:
    def __init__(
        self,
        rng: random.Random | None = None,
        latency: float = config.COLLABORATOR_LATENCY,
    ):
        """
        Args:
            rng: Random source (seed it for reproducible data)
            latency: Simulated network delay in seconds
        """
        self.rng = rng or random.Random()
        self.latency = latency

    async def _simulate_latency(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)


class WeatherProvider(_StubProvider):
    """Stubbed weather source returning plausible random conditions."""

    def _conditions(self) -> tuple[str, ...]:
        return frozen_table("catalog")["weather_conditions"]

    async def current(self, location: str) -> WeatherSnapshot:
        """Current temperature, humidity and condition for a location."""
        await self._simulate_latency()
        return WeatherSnapshot(
            location=location,
            temperature=self.rng.randint(10, 39),
            humidity=self.rng.randint(30, 69),
            condition=self.rng.choice(self._conditions()),
        )

    async def report(self, location: str) -> WeatherReport:
        """Current conditions with a five-day forecast, alerts and advice."""
        snapshot = await self.current(location)
        forecast = [
            ForecastDay(
                day=day, temp=self.rng.randint(10, 39), condition=condition, humidity=humidity
            )
            for day, condition, humidity in FORECAST_DAYS
        ]

        alerts = []
        if snapshot.condition == "Rainy" or any(
            day.condition == "Rainy" for day in forecast[:2]
        ):
            alerts.append(
                WeatherAlert(type="warning", message="Heavy rainfall expected in next 24 hours")
            )
        if 15 <= snapshot.temperature <= 30:
            alerts.append(
                WeatherAlert(type="info", message="Optimal conditions for crop growth")
            )

        report = WeatherReport(
            **snapshot.model_dump(),
            wind_speed=self.rng.randint(5, 24),
            pressure=self.rng.randint(1000, 1049),
            visibility=self.rng.randint(5, 14),
            forecast=forecast,
            alerts=alerts,
        )
        report.recommendations = weather_recommendations(report)
        return report


class MarketProvider(_StubProvider):
    """Stubbed Indian market price source (INR)."""

    async def quote(self, crop: str) -> MarketQuote:
        """
        Indicative price for a crop with a random trend of up to 10 %.
        Unknown crops get the default local APMC price.
        """
        await self._simulate_latency()
        catalog = frozen_table("catalog")
        listing = catalog["market_prices"].get(
            crop.lower(), catalog["default_market_price"]
        )

        trend = self.rng.choice(["up", "down", "stable"])
        price = listing["price"]
        if trend == "up":
            price = round(price * (1 + self.rng.random() * 0.1))
        elif trend == "down":
            price = round(price * (1 - self.rng.random() * 0.1))

        return MarketQuote(
            crop=crop,
            price=price,
            unit=listing["unit"],
            category=listing["category"],
            market=listing["market"],
            trend=trend,
            last_updated=datetime.now(timezone.utc),
        )


class ImageAnalyzer(_StubProvider):
    """
    Stubbed image classifier. Stands in for a vision model and always detects
    tomato with brown spots and yellowing leaves.
    """

    async def analyze(
        self, image: bytes, content_type: str | None = None
    ) -> ExternalAnalysis:
        """
        Detects crop and symptoms in an uploaded image.

        Raises:
            InvalidImageError: If the upload is empty or not an image
        """
        if content_type is not None and not content_type.startswith("image/"):
            raise InvalidImageError("Only image files are allowed")
        if not image:
            raise InvalidImageError("No image file provided")

        await self._simulate_latency()
        logger.info("image_analyzed", image_size=len(image), content_type=content_type)
        return ExternalAnalysis(
            crop_type="Tomato",
            detected_symptoms=["Brown spots", "Yellowing leaves"],
            confidence=0.85,
            ai_processed=True,
            image_size=len(image),
            timestamp=datetime.now(timezone.utc),
        )
