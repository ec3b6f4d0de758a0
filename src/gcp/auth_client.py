"""Firebase Authentication client.

Signs users in against the Identity Toolkit REST API using the web API key,
keeps the resulting session and refreshes its ID token when it expires.
Nothing is sent over the network until a sign-in method is called.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import requests
from firebase_admin import App
from firebase_admin import auth as admin_auth
from google.oauth2.credentials import Credentials

from config import Config, FirebaseConfig
from .oauth_provider import GoogleAuthProvider, OAuthCredential

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1"

# Refresh ID tokens this long before Firebase says they expire
EXPIRY_BUFFER = timedelta(minutes=5)


class FirebaseAuthError(RuntimeError):
    """Raised when Firebase rejects an authentication request."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(f"{code}: {message}" if message else code)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class AuthSession:
    """A signed-in Firebase user and their tokens."""

    uid: str
    id_token: str
    refresh_token: str
    expires_at: datetime
    email: Optional[str] = None
    display_name: Optional[str] = None
    provider_id: Optional[str] = None
    oauth_access_token: Optional[str] = None
    oauth_id_token: Optional[str] = None
    is_new_user: bool = False

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at - EXPIRY_BUFFER


AuthStateListener = Callable[[Optional[AuthSession]], None]


def _expires_at(expires_in: Any) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=int(expires_in or 3600))


class FirebaseAuthClient:
    """Client-side Firebase Authentication bound to one Firebase app."""

    def __init__(self, app: App, config: FirebaseConfig, emulator_host: Optional[str] = None):
        """Initialize the auth client.

        Args:
            app: firebase_admin app the client belongs to
            config: Web config supplying the API key and auth domain
            emulator_host: host:port of a local Auth emulator. If None, uses
                FIREBASE_AUTH_EMULATOR_HOST.
        """
        self.app = app
        self.config = config
        self.emulator_host = Config.FIREBASE_AUTH_EMULATOR_HOST if emulator_host is None else emulator_host
        if self.emulator_host:
            self.identity_toolkit_url = f"http://{self.emulator_host}/identitytoolkit.googleapis.com/v1"
            self.secure_token_url = f"http://{self.emulator_host}/securetoken.googleapis.com/v1"
        else:
            self.identity_toolkit_url = IDENTITY_TOOLKIT_URL
            self.secure_token_url = SECURE_TOKEN_URL
        self._session: Optional[AuthSession] = None
        self._listeners: List[AuthStateListener] = []

    @property
    def current_user(self) -> Optional[AuthSession]:
        """The signed-in session, or None."""
        return self._session

    @property
    def redirect_uri(self) -> str:
        """OAuth handler URL on the project's auth domain."""
        return f"https://{self.config.auth_domain}/__/auth/handler"

    def add_auth_state_listener(self, callback: AuthStateListener) -> Callable[[], None]:
        """
        Register a callback for sign-in, token refresh and sign-out.

        Args:
            callback: Called with the new session, or None after sign-out

        Returns:
            Function that removes the callback
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_session(self, session: Optional[AuthSession]) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def _post(self, url: str, **kwargs) -> Dict[str, Any]:
        """
        POST to a Firebase auth endpoint with the API key.

        Returns:
            Response JSON data

        Raises:
            FirebaseAuthError: Firebase returned an error response
        """
        try:
            response = requests.post(
                url,
                params={"key": self.config.api_key},
                timeout=Config.HTTP_TIMEOUT,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Error reaching Firebase Auth at {url}: {e}")
            raise

        if not response.ok:
            code, message = self._parse_error(response)
            logger.error(f"Firebase Auth request failed ({response.status_code}): {code}")
            raise FirebaseAuthError(code, message)

        return response.json()

    @staticmethod
    def _parse_error(response: requests.Response) -> tuple:
        """Extract the error code from a Firebase error response."""
        try:
            raw = response.json().get("error", {}).get("message", "")
        except ValueError:
            raw = ""
        if not raw:
            return f"HTTP_{response.status_code}", response.text
        # Messages look like "INVALID_PASSWORD" or "TOO_MANY_ATTEMPTS_TRY_LATER : details"
        code, _, detail = raw.partition(" : ")
        return code.strip(), detail.strip()

    def _accounts(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"{self.identity_toolkit_url}/accounts:{method}", json=payload)

    def _session_from_response(self, data: Dict[str, Any]) -> AuthSession:
        return AuthSession(
            uid=data["localId"],
            id_token=data["idToken"],
            refresh_token=data["refreshToken"],
            expires_at=_expires_at(data.get("expiresIn")),
            email=data.get("email"),
            display_name=data.get("displayName"),
            provider_id=data.get("providerId", "password" if data.get("email") else "anonymous"),
            oauth_access_token=data.get("oauthAccessToken"),
            oauth_id_token=data.get("oauthIdToken"),
            is_new_user=bool(data.get("isNewUser", False)),
        )

    def sign_in_with_credential(self, credential: OAuthCredential, request_uri: Optional[str] = None) -> AuthSession:
        """
        Exchange identity provider tokens for a Firebase session.

        Args:
            credential: Tokens from GoogleAuthProvider.credential()
            request_uri: URI the IdP redirected to. Defaults to the
                auth domain's handler.

        Returns:
            The new session

        Raises:
            FirebaseAuthError: Rejected, or the email already belongs to an
                account with a different provider (NEED_CONFIRMATION)
        """
        data = self._accounts(
            "signInWithIdp",
            {
                "postBody": credential.post_body(),
                "requestUri": request_uri or self.redirect_uri,
                "returnSecureToken": True,
                "returnIdpCredential": True,
            },
        )
        # An account with this email exists under another provider; Firebase answers 200 without tokens
        if data.get("needConfirmation") or "idToken" not in data:
            code = "NEED_CONFIRMATION" if data.get("needConfirmation") else "MISSING_ID_TOKEN"
            logger.error(f"Firebase sign-in with {credential.provider_id} returned no session: {code}")
            raise FirebaseAuthError(code, data.get("errorMessage") or data.get("email", ""))
        session = self._session_from_response(data)
        logger.info(f"Signed in {session.uid} with {credential.provider_id}")
        self._set_session(session)
        return session

    def sign_in_with_google_credentials(self, google_credentials: Credentials, request_uri: Optional[str] = None) -> AuthSession:
        """
        Sign in with credentials returned by a google_auth_oauthlib flow.

        Args:
            google_credentials: Credentials from flow.credentials or
                run_local_server()

        Returns:
            The new session
        """
        credential = GoogleAuthProvider.credential(
            id_token=getattr(google_credentials, "id_token", None),
            access_token=google_credentials.token,
        )
        return self.sign_in_with_credential(credential, request_uri=request_uri)

    def sign_in_with_email_and_password(self, email: str, password: str) -> AuthSession:
        """Sign in an existing email/password user."""
        data = self._accounts(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        session = self._session_from_response(data)
        logger.info(f"Signed in {session.uid} with password")
        self._set_session(session)
        return session

    def create_user_with_email_and_password(self, email: str, password: str) -> AuthSession:
        """Register a new email/password user and sign them in."""
        data = self._accounts(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        session = replace(self._session_from_response(data), is_new_user=True)
        logger.info(f"Created user {session.uid}")
        self._set_session(session)
        return session

    def sign_in_anonymously(self) -> AuthSession:
        """Create and sign in an anonymous user."""
        data = self._accounts("signUp", {"returnSecureToken": True})
        session = replace(self._session_from_response(data), is_new_user=True)
        logger.info(f"Signed in anonymous user {session.uid}")
        self._set_session(session)
        return session

    def send_password_reset_email(self, email: str) -> None:
        """Ask Firebase to email a password reset link."""
        self._accounts("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        logger.info(f"Sent password reset email to {email}")

    def get_account_info(self, id_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Look up the account behind an ID token.

        Args:
            id_token: Token to look up. If None, uses the current session.

        Returns:
            Account record or None if Firebase returns no user
        """
        token = id_token or self.get_id_token()
        data = self._accounts("lookup", {"idToken": token})
        users = data.get("users") or []
        return users[0] if users else None

    def refresh_session(self, session: Optional[AuthSession] = None) -> AuthSession:
        """
        Trade a refresh token for a new ID token.

        Args:
            session: Session to refresh. If None, refreshes the current one.

        Returns:
            The refreshed session
        """
        session = session or self._session
        if session is None:
            raise FirebaseAuthError("NO_CURRENT_USER", "No user is signed in")

        data = self._post(
            f"{self.secure_token_url}/token",
            data={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
        )
        refreshed = replace(
            session,
            uid=data.get("user_id", session.uid),
            id_token=data["id_token"],
            refresh_token=data.get("refresh_token", session.refresh_token),
            expires_at=_expires_at(data.get("expires_in")),
            is_new_user=False,
        )
        logger.info(f"Refreshed ID token for {refreshed.uid}")
        self._set_session(refreshed)
        return refreshed

    def get_id_token(self, force_refresh: bool = False) -> str:
        """
        Get the current user's ID token, refreshing it if expired.

        Raises:
            FirebaseAuthError: No user is signed in
        """
        if self._session is None:
            raise FirebaseAuthError("NO_CURRENT_USER", "No user is signed in")
        if force_refresh or self._session.is_expired:
            return self.refresh_session().id_token
        return self._session.id_token

    def verify_id_token(self, id_token: str, check_revoked: bool = False) -> Dict[str, Any]:
        """
        Verify an ID token with the Admin SDK.

        Returns:
            Decoded token claims
        """
        return admin_auth.verify_id_token(id_token, app=self.app, check_revoked=check_revoked)

    def sign_out(self) -> None:
        """Forget the current session."""
        if self._session is not None:
            logger.info(f"Signed out {self._session.uid}")
        self._set_session(None)
