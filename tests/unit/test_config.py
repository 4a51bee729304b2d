"""Unit tests for environment configuration"""

import pytest
from credito_gateway.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.validation_tolerance_percent == 15
    assert settings.validation_default_valor_solicitado == 150_000
    assert settings.data_provider == "seeded"


def test_numeric_overrides_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("VALIDATION_TOLERANCE_PERCENT", "10.5")
    monkeypatch.setenv("ELIGIBILITY_FAIXA_G_SCORE_MIN", "850")

    settings = Settings(_env_file=None)

    assert settings.validation_tolerance_percent == 10.5
    assert settings.eligibility_faixa_g_score_min == 850


@pytest.mark.parametrize("raw", ["", "   ", "quinze", "inf", "nan"])
def test_invalid_numbers_fall_back_to_default(monkeypatch: pytest.MonkeyPatch, raw: str):
    monkeypatch.setenv("VALIDATION_TOLERANCE_PERCENT", raw)
    monkeypatch.setenv("ELIGIBILITY_PERCENTUAL_MIN", raw)

    settings = Settings(_env_file=None)

    assert settings.validation_tolerance_percent == 15
    assert settings.eligibility_percentual_min == 50


def test_thresholds_built_from_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ELIGIBILITY_UPGRADE_HIGH", "95")
    monkeypatch.setenv("ELIGIBILITY_FAIXA_P_FATURAMENTO_MIN", "20000")

    thresholds = Settings(_env_file=None).eligibility_thresholds()

    assert thresholds.upgrade_high == 95
    assert thresholds.faixa_p.faturamento == 20_000
    assert thresholds.faixa_m.score == 600


def test_session_capacity_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SESSION_MAX_ENTRIES", "50")
    assert Settings(_env_file=None).session_max_entries == 50

    monkeypatch.setenv("SESSION_MAX_ENTRIES", "muitas")
    assert Settings(_env_file=None).session_max_entries == 1000
