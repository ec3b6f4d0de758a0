"""Tests for Firebase configuration loading."""

from config import Config, FirebaseConfig


def test_from_env_reads_firebase_variables():
    config = FirebaseConfig.from_env(
        {
            "FIREBASE_API_KEY": "key",
            "FIREBASE_AUTH_DOMAIN": "proj.firebaseapp.com",
            "FIREBASE_PROJECT_ID": "proj",
            "FIREBASE_STORAGE_BUCKET": "proj.firebasestorage.app",
            "FIREBASE_MESSAGING_SENDER_ID": "42",
            "FIREBASE_APP_ID": "1:42:web:ff",
            "UNRELATED": "ignored",
        }
    )

    assert config.api_key == "key"
    assert config.auth_domain == "proj.firebaseapp.com"
    assert config.project_id == "proj"
    assert config.storage_bucket == "proj.firebasestorage.app"
    assert config.messaging_sender_id == "42"
    assert config.app_id == "1:42:web:ff"


def test_from_env_defaults_to_config_class(monkeypatch):
    monkeypatch.setattr(Config, "FIREBASE_PROJECT_ID", "from-class")
    monkeypatch.setattr(Config, "FIREBASE_API_KEY", "class-key")

    config = FirebaseConfig.from_env()

    assert config.project_id == "from-class"
    assert config.api_key == "class-key"


def test_from_dict_accepts_console_web_config():
    config = FirebaseConfig.from_dict(
        {
            "apiKey": "key",
            "authDomain": "proj.firebaseapp.com",
            "projectId": "proj",
            "storageBucket": "proj.firebasestorage.app",
            "messagingSenderId": "42",
            "appId": "1:42:web:ff",
            "measurementId": "G-XYZ",
        }
    )

    assert config == FirebaseConfig("key", "proj.firebaseapp.com", "proj", "proj.firebasestorage.app", "42", "1:42:web:ff")
    assert config.to_dict()["projectId"] == "proj"
    assert "measurementId" not in config.to_dict()


def test_from_dict_accepts_snake_case_keys():
    config = FirebaseConfig.from_dict({"project_id": "proj", "api_key": "key"})

    assert config.project_id == "proj"
    assert config.api_key == "key"
    assert config.auth_domain == ""


def test_missing_fields_lists_empty_values():
    config = FirebaseConfig(api_key="key", project_id="proj")

    assert config.missing_fields() == ["auth_domain", "storage_bucket", "messaging_sender_id", "app_id"]


def test_app_options_skip_empty_values(firebase_config):
    assert firebase_config.app_options() == {
        "projectId": "demo-guard",
        "storageBucket": "demo-guard.firebasestorage.app",
    }
    assert FirebaseConfig(project_id="proj").app_options() == {"projectId": "proj"}


def test_repr_hides_api_key(firebase_config):
    assert "test-api-key" not in repr(firebase_config)
    assert "demo-guard" in repr(firebase_config)


def test_config_is_immutable(firebase_config):
    try:
        firebase_config.project_id = "other"
    except AttributeError:
        pass
    else:
        raise AssertionError("FirebaseConfig should be frozen")


def test_validate_reports_missing_web_config(monkeypatch):
    monkeypatch.setattr(Config, "FIREBASE_CONFIG_SECRET", "")
    monkeypatch.setattr(Config, "FIREBASE_API_KEY", "")
    monkeypatch.setattr(Config, "FIREBASE_AUTH_DOMAIN", "proj.firebaseapp.com")
    monkeypatch.setattr(Config, "FIREBASE_PROJECT_ID", "")

    assert Config.validate() == ["FIREBASE_API_KEY", "FIREBASE_PROJECT_ID"]


def test_validate_with_secret_only_needs_project(monkeypatch):
    monkeypatch.setattr(Config, "FIREBASE_CONFIG_SECRET", "firebase-web-config")
    monkeypatch.setattr(Config, "GOOGLE_CLOUD_PROJECT", "")
    monkeypatch.setattr(Config, "FIREBASE_PROJECT_ID", "")
    monkeypatch.setattr(Config, "FIREBASE_API_KEY", "")

    assert Config.validate() == ["GOOGLE_CLOUD_PROJECT"]

    monkeypatch.setattr(Config, "GOOGLE_CLOUD_PROJECT", "proj")
    assert Config.validate() == []
