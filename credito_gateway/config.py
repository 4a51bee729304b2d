"""Configuration management using Pydantic Settings"""

import math
from typing import Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from credito_gateway.domain.eligibility import EligibilityThresholds, TierThreshold

NUMERIC_FIELDS = (
    "validation_tolerance_percent",
    "validation_default_valor_solicitado",
    "eligibility_percentual_min",
    "eligibility_upgrade_high",
    "eligibility_upgrade_medium",
    "eligibility_faixa_p_score_min",
    "eligibility_faixa_p_faturamento_min",
    "eligibility_faixa_m_score_min",
    "eligibility_faixa_m_faturamento_min",
    "eligibility_faixa_g_score_min",
    "eligibility_faixa_g_faturamento_min",
    "session_max_entries",
)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Batch validation
    validation_tolerance_percent: float = 15
    validation_default_valor_solicitado: int = 150_000

    # Eligibility policy
    eligibility_percentual_min: float = 50
    eligibility_upgrade_high: float = 90
    eligibility_upgrade_medium: float = 70
    eligibility_faixa_p_score_min: int = 400
    eligibility_faixa_p_faturamento_min: int = 10_000
    eligibility_faixa_m_score_min: int = 600
    eligibility_faixa_m_faturamento_min: int = 100_000
    eligibility_faixa_g_score_min: int = 800
    eligibility_faixa_g_faturamento_min: int = 1_000_000

    # Credit data source: "seeded" (deterministic fake) or "http" (upstream API)
    data_provider: str = "seeded"
    upstream_base_url: str = "http://localhost:8001"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    upstream_max_retries: int = 3
    upstream_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Analysis sessions kept in memory; the oldest is evicted beyond this
    session_max_entries: int = 1000

    # Service
    service_name: str = "credito-gateway"
    log_level: str = "INFO"

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def fallback_on_invalid_number(cls, value: Any, info: ValidationInfo) -> Any:
        """Empty or non-numeric values fall back to the field default"""
        if isinstance(value, str):
            text = value.strip()
            try:
                number = float(text)
            except ValueError:
                return cls.model_fields[info.field_name].default
            if not math.isfinite(number):
                return cls.model_fields[info.field_name].default
            if cls.model_fields[info.field_name].annotation is int:
                return int(number)
            return number
        return value

    def eligibility_thresholds(self) -> EligibilityThresholds:
        """Build the immutable threshold set consumed by the eligibility engine"""
        return EligibilityThresholds(
            percentual_min=self.eligibility_percentual_min,
            upgrade_high=self.eligibility_upgrade_high,
            upgrade_medium=self.eligibility_upgrade_medium,
            faixa_p=TierThreshold(
                score=self.eligibility_faixa_p_score_min,
                faturamento=self.eligibility_faixa_p_faturamento_min,
            ),
            faixa_m=TierThreshold(
                score=self.eligibility_faixa_m_score_min,
                faturamento=self.eligibility_faixa_m_faturamento_min,
            ),
            faixa_g=TierThreshold(
                score=self.eligibility_faixa_g_score_min,
                faturamento=self.eligibility_faixa_g_faturamento_min,
            ),
        )


settings = Settings()
