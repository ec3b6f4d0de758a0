"""Tests for the Google sign-in provider."""

from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs

import pytest

from gcp.oauth_provider import BASE_SCOPES, GMAIL_READONLY_SCOPE, GoogleAuthProvider


def test_new_provider_has_no_extra_scopes():
    provider = GoogleAuthProvider()

    assert provider.provider_id == "google.com"
    assert provider.scopes == []
    assert provider.custom_parameters == {}


def test_add_scope_ignores_duplicates_and_chains():
    provider = GoogleAuthProvider()

    result = provider.add_scope(GMAIL_READONLY_SCOPE).add_scope(GMAIL_READONLY_SCOPE)

    assert result is provider
    assert provider.scopes == [GMAIL_READONLY_SCOPE]


def test_scopes_property_is_a_copy():
    provider = GoogleAuthProvider().add_scope(GMAIL_READONLY_SCOPE)

    provider.scopes.append("https://www.googleapis.com/auth/drive")

    assert provider.scopes == [GMAIL_READONLY_SCOPE]


def test_flow_scopes_put_sign_in_scopes_first():
    provider = GoogleAuthProvider().add_scope(GMAIL_READONLY_SCOPE).add_scope("openid")

    assert provider.flow_scopes() == BASE_SCOPES + [GMAIL_READONLY_SCOPE]


def test_create_flow_requests_provider_scopes():
    provider = GoogleAuthProvider().add_scope(GMAIL_READONLY_SCOPE)
    client_config = {"web": {"client_id": "id", "client_secret": "secret"}}

    with patch("gcp.oauth_provider.Flow.from_client_config") as mock_from_config:
        flow = provider.create_flow(client_config, redirect_uri="https://example.test/callback")

    assert flow is mock_from_config.return_value
    mock_from_config.assert_called_once_with(
        client_config,
        scopes=BASE_SCOPES + [GMAIL_READONLY_SCOPE],
        redirect_uri="https://example.test/callback",
    )


def test_create_installed_app_flow_reads_client_secrets_file():
    provider = GoogleAuthProvider().add_scope(GMAIL_READONLY_SCOPE)

    with patch("gcp.oauth_provider.InstalledAppFlow.from_client_secrets_file") as mock_from_file:
        provider.create_installed_app_flow("/tmp/client_secret.json")

    mock_from_file.assert_called_once_with(
        "/tmp/client_secret.json",
        scopes=BASE_SCOPES + [GMAIL_READONLY_SCOPE],
    )


def test_authorization_url_merges_custom_parameters():
    provider = GoogleAuthProvider().set_custom_parameters({"prompt": "select_account", "login_hint": "a@b.test"})
    flow = MagicMock()
    flow.authorization_url.return_value = ("https://accounts.google.com/o/oauth2/auth?x", "state")

    url, state = provider.authorization_url(flow, access_type="offline", prompt="consent")

    assert state == "state"
    flow.authorization_url.assert_called_once_with(prompt="consent", login_hint="a@b.test", access_type="offline")


def test_set_custom_parameters_replaces_previous():
    provider = GoogleAuthProvider().set_custom_parameters({"prompt": "consent"})

    provider.set_custom_parameters({"hd": "example.test"})

    assert provider.custom_parameters == {"hd": "example.test"}


def test_credential_requires_a_token():
    with pytest.raises(ValueError):
        GoogleAuthProvider.credential()


def test_credential_post_body():
    credential = GoogleAuthProvider.credential(id_token="google-id-token", access_token="google-access-token")

    body = parse_qs(credential.post_body())

    assert credential.provider_id == "google.com"
    assert body == {
        "id_token": ["google-id-token"],
        "access_token": ["google-access-token"],
        "providerId": ["google.com"],
    }
