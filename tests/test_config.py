"""Tests for settings and the FACEBOOK secret."""

import pytest

from app.config import Settings, get_facebook_config
from app.exceptions import ConfigurationError


def test_facebook_config_from_environment():
    config = get_facebook_config()
    assert config.app_id == "1234567890"
    assert config.app_secret == "test-app-secret"
    assert config.verify_token == "verify-me"


@pytest.mark.parametrize(
    "raw",
    [None, "", "{not json", '["appId"]', '{"appId": "1"}'],
)
def test_invalid_facebook_config(raw):
    with pytest.raises(ConfigurationError):
        get_facebook_config(Settings(facebook=raw))


def test_verify_token_is_optional():
    config = get_facebook_config(
        Settings(facebook='{"app_id": "1", "app_secret": "s"}')
    )
    assert config.verify_token is None


def test_graph_base_url():
    assert (
        Settings(facebook_graph_api_version="v20.0").graph_base_url
        == "https://graph.facebook.com/v20.0"
    )
    assert (
        Settings(facebook_graph_base_url="http://graph.local/").graph_base_url
        == "http://graph.local"
    )


def test_test_environment_uses_test_database():
    assert Settings().is_test
    assert Settings().database_url.startswith("sqlite")
