"""
Pydantic Settings: centralized configuration loaded from environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from trademind.core.constants import FailurePolicy


class Settings(BaseSettings):
    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ── Orchestrator ──────────────────────────
    STAGE_FAILURE_POLICY: FailurePolicy = FailurePolicy.ABORT
    EVENT_RETENTION_LIMIT: int = Field(default=100, ge=1)

    # ── Simulated stage functions ─────────────
    SIMULATION_DELAY_SCALE: float = Field(default=1.0, ge=0.0)
    SIMULATION_SEED: int | None = None

    # ── Duty calculation ──────────────────────
    DUTY_CURRENCY: str = "USD"
    DEFAULT_TAX_RATE: float = 0.20

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
