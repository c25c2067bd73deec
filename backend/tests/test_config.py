"""
Event Gateway: Configuration and Startup Tests
===============================================

What we test:
    ✅ Missing or short JWT secret fails validation
    ✅ Invalid log level rejected, valid one normalized to upper case
    ✅ Collaborator readiness flags follow their credentials
    ✅ Lifespan aborts on invalid configuration, otherwise opens and
       closes the shared HTTP client
"""

import httpx
import pytest
from pydantic import ValidationError as PydanticValidationError

from gateway.config import Settings
from gateway.main import create_app, lifespan


class TestSettings:

    def test_missing_jwt_secret(self):
        settings = Settings(_env_file=None, jwt_secret="")
        with pytest.raises(ValueError, match="JWT_SECRET is not set"):
            settings.validate_required_for_production()

    def test_short_jwt_secret(self):
        settings = Settings(_env_file=None, jwt_secret="short")
        with pytest.raises(ValueError, match="at least 32 characters"):
            settings.validate_required_for_production()

    def test_valid(self, test_settings):
        test_settings.validate_required_for_production()

    def test_log_level(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_collaborator_flags(self, test_settings):
        assert test_settings.cloudinary_configured
        assert test_settings.payment_configured
        assert test_settings.smtp_configured

        bare = Settings(_env_file=None, jwt_secret="x" * 40)
        assert not bare.cloudinary_configured
        assert not bare.payment_configured
        assert not bare.smtp_configured

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestLifespan:

    @pytest.mark.asyncio
    async def test_aborts_on_bad_config(self):
        app = create_app(Settings(_env_file=None, jwt_secret="short", log_level="WARNING"))
        with pytest.raises(ValueError):
            async with lifespan(app):
                pass

    @pytest.mark.asyncio
    async def test_shared_client_lifecycle(self, test_settings):
        app = create_app(test_settings)
        async with lifespan(app):
            client = app.state.http_client
            assert isinstance(client, httpx.AsyncClient)
            assert not client.is_closed
        assert client.is_closed
        assert app.state.http_client is None
