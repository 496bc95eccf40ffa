"""Application configuration."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROPRIO_",
        env_file=".env",
        extra="ignore",
    )

    # Application
    app_name: str = "Proprio Motion Engine"
    debug: bool = False
    api_prefix: str = "/api"

    # Keypoint history
    history_size: int = Field(60, ge=1)  # ~1 second at 60fps
    confidence_threshold: float = Field(0.3, ge=0.0, lt=1.0)

    # Amplitude estimation (calibration parameters, tuned by hand)
    variance_scale: float = Field(500.0, gt=0.0)
    ema_alpha: float = Field(0.2, gt=0.0, le=1.0)
    stability_coupling: float = Field(0.5, ge=0.0)  # Stability drop per unit of tremor amplitude
    symmetry_floor: float = Field(0.001, gt=0.0)

    # Trend classification
    trend_window_size: int = Field(30, ge=2)
    min_trend_samples: int = Field(10, ge=2)
    trend_threshold: float = Field(0.02, ge=0.0)

    # Feedback thresholds
    tremor_feedback_threshold: float = Field(0.3, ge=0.0, le=1.0)
    tremor_critical_threshold: float = Field(0.5, ge=0.0, le=1.0)
    gait_instability_threshold: float = Field(0.8, ge=0.0, le=1.0)

    # Frame admission
    analysis_interval_seconds: float = Field(0.1, ge=0.0)  # ~10fps


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
