from __future__ import annotations

import pytest

from config.settings import Settings
from core.exceptions import ProviderError


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        GOPHER_CLIENT_TOKEN="test-token",
        DATA_DIR=str(tmp_path / "data"),
        RUN_LOG_URL=f"sqlite:///{tmp_path / 'runs.db'}",
        REQUEST_DELAY=0.0,
        AMOUNT=150,
    )


@pytest.fixture
def provider_error() -> ProviderError:
    return ProviderError("rate limited", status_code=429)
