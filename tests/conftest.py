"""Shared settings fixtures."""

import pytest


@pytest.fixture
def settings() -> dict[str, str]:
    return {"site_id": "5", "endpoint_url": "https://matomo.test"}


@pytest.fixture
def auth_settings(settings) -> dict[str, str]:
    return {**settings, "authentication_token": "secret-token"}
