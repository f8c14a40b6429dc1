"""Tests for landing pages and settings validation."""

from __future__ import annotations

import pytest

from aidbridge.config import Settings
from aidbridge.domain.models import UserType
from aidbridge.domain.navigation import Page, landing_page


class TestLandingPage:
    def test_donor(self):
        assert landing_page(UserType.DONOR) is Page.DONOR_DASHBOARD

    def test_ngo(self):
        assert landing_page(UserType.NGO) is Page.NGO_DASHBOARD

    def test_counterpart_roles(self):
        assert UserType.DONOR.counterpart is UserType.NGO
        assert UserType.NGO.counterpart is UserType.DONOR


class TestSettings:
    def test_defaults_valid(self):
        Settings(_env_file=None).validate_runtime()

    def test_key_without_endpoint(self):
        settings = Settings(_env_file=None, azure_openai_api_key="k", azure_openai_endpoint="")
        with pytest.raises(ValueError, match="AZURE_OPENAI_ENDPOINT"):
            settings.validate_runtime()

    def test_unknown_observability(self):
        with pytest.raises(ValueError, match="OBSERVABILITY"):
            Settings(_env_file=None, observability="datadog").validate_runtime()

    def test_reply_model_configured(self):
        settings = Settings(
            _env_file=None,
            azure_openai_api_key="k",
            azure_openai_endpoint="https://example.openai.azure.com/",
        )
        assert settings.reply_model_configured
