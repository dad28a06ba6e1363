import os
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings with validation.
    Uses Pydantic Settings for automatic env var loading and type validation.
    Environment variables are read with the FARMER_AGENT_ prefix.
    """

    # --- Directory Paths ---
    base_dir: str = Field(
        default_factory=lambda: os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
        description="Base directory of the project",
    )

    @property
    def rules_path(self) -> str:
        """Path to the YAML rule tables."""
        return os.path.join(self.base_dir, "config")

    # --- Conversation Engine ---
    history_window: int = Field(
        default=5,
        description="Number of most recent conversation turns read by the composer",
        ge=1,
        le=20,
    )
    confidence_cap: float = Field(
        default=0.95,
        description="Upper bound for diagnosis confidence after boosts",
        gt=0.0,
        le=1.0,
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Root logging level")
    structured_logs: bool = Field(
        default=True, description="Emit JSON log lines instead of plain text"
    )

    # --- Collaborator Configuration ---
    collaborator_timeout: int = Field(
        default=10,
        description="Timeout in seconds for weather/market/image collaborator calls",
        ge=1,
        le=120,
    )
    collaborator_max_retries: int = Field(
        default=3,
        description="Maximum attempts for a failing collaborator call",
        ge=1,
        le=5,
    )
    collaborator_rate_limit: int = Field(
        default=3,
        description="Maximum concurrent collaborator calls (rate limiting)",
        ge=1,
        le=10,
    )
    collaborator_latency: float = Field(
        default=0.0,
        description="Simulated latency in seconds of the stubbed data providers",
        ge=0.0,
        le=10.0,
    )

    # --- HTTP API ---
    api_title: str = Field(default="Farmer Agent API", description="OpenAPI title")
    api_version: str = Field(default="1.0.0", description="API version")
    api_host: str = Field(default="0.0.0.0", description="Bind address for uvicorn")
    api_port: int = Field(default=5000, description="Bind port for uvicorn")
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted size of an uploaded crop image",
        ge=1024,
    )

    class Config:
        """Pydantic config."""

        env_file = os.getenv("DOTENV_PATH", ".env")
        env_prefix = "FARMER_AGENT_"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get or create settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If env vars hold invalid values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


settings = get_settings()

# Directory paths
BASE_DIR = settings.base_dir
RULES_PATH = settings.rules_path

# Conversation engine parameters
HISTORY_WINDOW = settings.history_window
CONFIDENCE_CAP = settings.confidence_cap

# Logging parameters
LOG_LEVEL = settings.log_level
STRUCTURED_LOGS = settings.structured_logs

# Collaborator parameters
COLLABORATOR_TIMEOUT = settings.collaborator_timeout
COLLABORATOR_MAX_RETRIES = settings.collaborator_max_retries
COLLABORATOR_RATE_LIMIT = settings.collaborator_rate_limit
COLLABORATOR_LATENCY = settings.collaborator_latency

# API parameters
MAX_UPLOAD_BYTES = settings.max_upload_bytes


def check_env_vars():
    """
    Validates the configuration loaded from the environment.

    Raises:
        ValidationError: If a variable holds an invalid value
        FileNotFoundError: If the rule tables directory is missing
    """
    try:
        current = get_settings()
        if not os.path.isdir(current.rules_path):
            raise FileNotFoundError(f"Rule tables not found at {current.rules_path}")
        print("✅ Configuration loaded and validated.")
    except Exception as e:
        print(f"❌ Configuration error: {e}")
        raise
