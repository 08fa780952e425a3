import pytest

from core.config import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    for key in ("PT_RISK_FREE_RATE", "PT_DEFAULT_VOLATILITY", "PT_MIN_BARS", "PT_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
