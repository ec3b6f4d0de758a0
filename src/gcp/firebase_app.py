"""Firebase app bootstrap.

Creates the Firebase app at most once per process and derives the three
handles the rest of the backend uses from it: the auth client, the
Firestore client and the Google sign-in provider (with Gmail read-only
access added). Nothing runs at import; the first call to initialize() or
one of the get_* accessors does the work.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import App, credentials

from config import Config, ConfigError, FirebaseConfig
from .auth_client import FirebaseAuthClient
from .firestore_client import FirestoreClient
from .oauth_provider import GMAIL_READONLY_SCOPE, GoogleAuthProvider
from .secret_manager import SecretManagerClient

logger = logging.getLogger(__name__)


class FirebaseBootstrapError(RuntimeError):
    """Raised when the Firebase clients are re-initialized with a different config."""


@dataclass(frozen=True)
class FirebaseClients:
    """Handles derived from one Firebase app."""

    config: FirebaseConfig
    app: App
    auth: FirebaseAuthClient
    db: FirestoreClient
    provider: GoogleAuthProvider


_CLIENTS: Optional[FirebaseClients] = None
_LOCK = threading.Lock()


def load_firebase_config() -> FirebaseConfig:
    """
    Resolve the Firebase web config.

    Reads the JSON secret named by FIREBASE_CONFIG_SECRET when set,
    otherwise the FIREBASE_* environment variables.

    Raises:
        ConfigError: The secret cannot be located or read
    """
    if not Config.FIREBASE_CONFIG_SECRET:
        return FirebaseConfig.from_env()

    project_id = Config.GOOGLE_CLOUD_PROJECT or Config.FIREBASE_PROJECT_ID
    if not project_id:
        raise ConfigError("GOOGLE_CLOUD_PROJECT is required to read FIREBASE_CONFIG_SECRET")

    config = SecretManagerClient(project_id).get_firebase_config(Config.FIREBASE_CONFIG_SECRET)
    if config is None:
        raise ConfigError(f"Firebase config secret not found: {Config.FIREBASE_CONFIG_SECRET}")

    logger.info(f"Loaded Firebase config from secret {Config.FIREBASE_CONFIG_SECRET}")
    return config


def _default_credential() -> credentials.Base:
    if Config.FIREBASE_SERVICE_ACCOUNT_FILE:
        return credentials.Certificate(Config.FIREBASE_SERVICE_ACCOUNT_FILE)
    # Resolved lazily on first use
    return credentials.ApplicationDefault()


def _get_or_create_app(config: FirebaseConfig, credential: Optional[credentials.Base], name: str) -> App:
    try:
        app = firebase_admin.get_app(name)
    except ValueError:
        return firebase_admin.initialize_app(
            credential or _default_credential(),
            options=config.app_options(),
            name=name,
        )

    # The db client follows the app, so it must point at the configured project
    for key, expected in config.app_options().items():
        actual = app.options.get(key)
        if actual != expected:
            raise FirebaseBootstrapError(
                f"Firebase app {name} has {key}={actual!r}, config expects {expected!r}"
            )
    logger.info(f"Reusing Firebase app {name}")
    return app


def initialize(
    config: Optional[FirebaseConfig] = None,
    credential: Optional[credentials.Base] = None,
    name: Optional[str] = None,
) -> FirebaseClients:
    """
    Create the Firebase app and its clients, once per process.

    Later calls return the same handles. On those calls `credential` is
    ignored, since the app already holds one.

    Args:
        config: Web config. If None, uses load_firebase_config().
        credential: Admin SDK credential. If None, uses the service account
            file from FIREBASE_SERVICE_ACCOUNT_FILE or Application Default
            Credentials.
        name: Firebase app name. If None, uses FIREBASE_APP_NAME.

    Returns:
        FirebaseClients with the auth, db and provider handles

    Raises:
        FirebaseBootstrapError: Already initialized with a different config
            or app name, or an existing app with this name belongs to
            another project or bucket
    """
    global _CLIENTS
    with _LOCK:
        if _CLIENTS is not None:
            if config is not None and config != _CLIENTS.config:
                raise FirebaseBootstrapError(
                    f"Firebase already initialized for project {_CLIENTS.config.project_id}"
                )
            if name is not None and name != _CLIENTS.app.name:
                raise FirebaseBootstrapError(
                    f"Firebase already initialized as app {_CLIENTS.app.name}"
                )
            return _CLIENTS

        if config is None:
            config = load_firebase_config()

        # Values are passed through as-is; Firebase reports bad ones on first use
        missing = config.missing_fields()
        if missing:
            logger.warning(f"Firebase config has empty fields: {', '.join(missing)}")

        app = _get_or_create_app(config, credential, name or Config.FIREBASE_APP_NAME)
        provider = GoogleAuthProvider().add_scope(GMAIL_READONLY_SCOPE)

        _CLIENTS = FirebaseClients(
            config=config,
            app=app,
            auth=FirebaseAuthClient(app, config),
            db=FirestoreClient(app),
            provider=provider,
        )
        logger.info(f"Initialized Firebase clients for project {config.project_id}")
        return _CLIENTS


def get_clients() -> FirebaseClients:
    """Return the process-wide Firebase clients, initializing on first call."""
    return initialize()


def get_auth() -> FirebaseAuthClient:
    return get_clients().auth


def get_db() -> FirestoreClient:
    return get_clients().db


def get_provider() -> GoogleAuthProvider:
    """
    Return the shared Google sign-in provider.

    It starts with only the Gmail read-only scope. The instance is shared,
    so add_scope() on it changes the scopes every caller requests; build a
    separate GoogleAuthProvider for one-off scopes.
    """
    return get_clients().provider


def reset() -> None:
    """Drop the cached clients and delete their Firebase app (used by tests)."""
    global _CLIENTS
    with _LOCK:
        if _CLIENTS is None:
            return
        firebase_admin.delete_app(_CLIENTS.app)
        _CLIENTS = None
        logger.info("Reset Firebase clients")
