"""Configuration management for the Firebase backend clients."""

import os
from dataclasses import dataclass, field, fields
from typing import Mapping, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class ConfigError(RuntimeError):
    """Raised when the Firebase configuration cannot be loaded."""


class Config:
    """Central configuration for Firebase credentials and settings."""

    # Firebase web app (values from the Firebase console "SDK setup and configuration")
    FIREBASE_API_KEY: str = os.getenv("FIREBASE_API_KEY", "")
    FIREBASE_AUTH_DOMAIN: str = os.getenv("FIREBASE_AUTH_DOMAIN", "")
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
    FIREBASE_STORAGE_BUCKET: str = os.getenv("FIREBASE_STORAGE_BUCKET", "")
    FIREBASE_MESSAGING_SENDER_ID: str = os.getenv("FIREBASE_MESSAGING_SENDER_ID", "")
    FIREBASE_APP_ID: str = os.getenv("FIREBASE_APP_ID", "")

    # Optional: read the web config above as one JSON secret from Secret Manager instead
    FIREBASE_CONFIG_SECRET: str = os.getenv("FIREBASE_CONFIG_SECRET", "")
    GOOGLE_CLOUD_PROJECT: str = os.getenv("GOOGLE_CLOUD_PROJECT", "")

    # Admin credential (defaults to Application Default Credentials when empty)
    FIREBASE_SERVICE_ACCOUNT_FILE: str = os.getenv("FIREBASE_SERVICE_ACCOUNT_FILE", "")
    FIREBASE_APP_NAME: str = os.getenv("FIREBASE_APP_NAME", "[DEFAULT]")

    # Local Auth emulator, e.g. "localhost:9099"
    FIREBASE_AUTH_EMULATOR_HOST: str = os.getenv("FIREBASE_AUTH_EMULATOR_HOST", "")

    # Runtime settings
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HTTP_TIMEOUT: int = int(os.getenv("HTTP_TIMEOUT", "30"))

    @classmethod
    def validate(cls) -> list[str]:
        """Validate required configuration values are present."""
        missing = []

        # A secret holds the whole web config, so only the project is needed to reach it
        if cls.FIREBASE_CONFIG_SECRET:
            if not (cls.GOOGLE_CLOUD_PROJECT or cls.FIREBASE_PROJECT_ID):
                missing.append("GOOGLE_CLOUD_PROJECT")
            return missing

        if not cls.FIREBASE_API_KEY:
            missing.append("FIREBASE_API_KEY")
        if not cls.FIREBASE_AUTH_DOMAIN:
            missing.append("FIREBASE_AUTH_DOMAIN")
        if not cls.FIREBASE_PROJECT_ID:
            missing.append("FIREBASE_PROJECT_ID")

        return missing


# Web config key -> FirebaseConfig attribute -> environment variable
_WEB_CONFIG_KEYS = {
    "apiKey": "api_key",
    "authDomain": "auth_domain",
    "projectId": "project_id",
    "storageBucket": "storage_bucket",
    "messagingSenderId": "messaging_sender_id",
    "appId": "app_id",
}
_ENV_KEYS = {
    "api_key": "FIREBASE_API_KEY",
    "auth_domain": "FIREBASE_AUTH_DOMAIN",
    "project_id": "FIREBASE_PROJECT_ID",
    "storage_bucket": "FIREBASE_STORAGE_BUCKET",
    "messaging_sender_id": "FIREBASE_MESSAGING_SENDER_ID",
    "app_id": "FIREBASE_APP_ID",
}


@dataclass(frozen=True)
class FirebaseConfig:
    """Firebase web app configuration.

    All values are opaque strings handed to Firebase as-is; malformed values
    surface as errors from the service on first use.
    """

    api_key: str = field(default="", repr=False)
    auth_domain: str = ""
    project_id: str = ""
    storage_bucket: str = ""
    messaging_sender_id: str = ""
    app_id: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FirebaseConfig":
        """Build a config from FIREBASE_* environment variables.

        Args:
            environ: Mapping to read from. If None, uses the Config class
                (process environment plus .env).

        Returns:
            FirebaseConfig instance
        """
        if environ is None:
            return cls(**{attr: getattr(Config, env) for attr, env in _ENV_KEYS.items()})
        return cls(**{attr: environ.get(env, "") for attr, env in _ENV_KEYS.items()})

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "FirebaseConfig":
        """Build a config from a web config mapping.

        Accepts both the console's camelCase keys (apiKey, authDomain, ...)
        and snake_case attribute names. Unknown keys are ignored.
        """
        values = {}
        for key, value in data.items():
            attr = _WEB_CONFIG_KEYS.get(key, key)
            if attr in _ENV_KEYS and value is not None:
                values[attr] = str(value)
        return cls(**values)

    def to_dict(self) -> dict:
        """Return the config in web config (camelCase) shape."""
        return {key: getattr(self, attr) for key, attr in _WEB_CONFIG_KEYS.items()}

    def missing_fields(self) -> list[str]:
        """Names of fields that are empty."""
        return [f.name for f in fields(self) if not getattr(self, f.name)]

    def app_options(self) -> dict:
        """Options for firebase_admin.initialize_app."""
        options = {}
        if self.project_id:
            options["projectId"] = self.project_id
        if self.storage_bucket:
            options["storageBucket"] = self.storage_bucket
        return options
