"""Firebase and GCP service clients: auth, Firestore, Secret Manager."""

from .auth_client import AuthSession, FirebaseAuthClient, FirebaseAuthError
from .firebase_app import (
    FirebaseBootstrapError,
    FirebaseClients,
    get_auth,
    get_clients,
    get_db,
    get_provider,
    initialize,
)
from .firestore_client import FirestoreClient
from .oauth_provider import GMAIL_READONLY_SCOPE, GoogleAuthProvider, OAuthCredential
from .secret_manager import SecretManagerClient

__all__ = [
    "AuthSession",
    "FirebaseAuthClient",
    "FirebaseAuthError",
    "FirebaseBootstrapError",
    "FirebaseClients",
    "FirestoreClient",
    "GMAIL_READONLY_SCOPE",
    "GoogleAuthProvider",
    "OAuthCredential",
    "SecretManagerClient",
    "get_auth",
    "get_clients",
    "get_db",
    "get_provider",
    "initialize",
]
