"""Google OAuth provider for Firebase sign-in.

Holds the scopes and custom parameters requested from Google and builds
the oauthlib flows that obtain the Google tokens Firebase exchanges for a
session.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urlencode

from google_auth_oauthlib.flow import Flow, InstalledAppFlow

logger = logging.getLogger(__name__)

GMAIL_READONLY_SCOPE = "https://www.googleapis.com/auth/gmail.readonly"

# Always requested by Google sign-in, so never stored in the scope list
BASE_SCOPES = ["openid", "https://www.googleapis.com/auth/userinfo.email", "https://www.googleapis.com/auth/userinfo.profile"]


@dataclass(frozen=True)
class OAuthCredential:
    """Google tokens to be exchanged for a Firebase session."""

    provider_id: str
    id_token: Optional[str] = None
    access_token: Optional[str] = None

    def post_body(self) -> str:
        """Render the identity provider post body for signInWithIdp."""
        params = {}
        if self.id_token:
            params["id_token"] = self.id_token
        if self.access_token:
            params["access_token"] = self.access_token
        params["providerId"] = self.provider_id
        return urlencode(params)


class GoogleAuthProvider:
    """OAuth provider configuration for signing in with Google."""

    PROVIDER_ID = "google.com"

    def __init__(self):
        self._scopes: List[str] = []
        self._custom_parameters: Dict[str, str] = {}

    @property
    def provider_id(self) -> str:
        return self.PROVIDER_ID

    @property
    def scopes(self) -> List[str]:
        """Scopes added on top of the basic sign-in scopes."""
        return list(self._scopes)

    @property
    def custom_parameters(self) -> Dict[str, str]:
        return dict(self._custom_parameters)

    def add_scope(self, scope: str) -> "GoogleAuthProvider":
        """
        Request an additional OAuth scope.

        Args:
            scope: Scope URL, e.g. GMAIL_READONLY_SCOPE

        Returns:
            The provider, for chaining
        """
        if scope not in self._scopes:
            self._scopes.append(scope)
            logger.debug(f"Added OAuth scope {scope}")
        return self

    def set_custom_parameters(self, params: Dict[str, str]) -> "GoogleAuthProvider":
        """
        Set extra authorization request parameters (prompt, login_hint, hd, ...).

        Replaces any parameters set before.
        """
        self._custom_parameters = dict(params)
        return self

    def flow_scopes(self) -> List[str]:
        """All scopes to request: basic sign-in scopes followed by added ones."""
        return BASE_SCOPES + [s for s in self._scopes if s not in BASE_SCOPES]

    def create_flow(self, client_config: dict, redirect_uri: Optional[str] = None) -> Flow:
        """
        Build a web server OAuth flow requesting this provider's scopes.

        Args:
            client_config: OAuth client config in the Google client secrets
                format ({"web": {...}} or {"installed": {...}})
            redirect_uri: Callback URL registered for the client

        Returns:
            google_auth_oauthlib Flow
        """
        return Flow.from_client_config(
            client_config,
            scopes=self.flow_scopes(),
            redirect_uri=redirect_uri,
        )

    def create_installed_app_flow(self, client_secrets_file: str) -> InstalledAppFlow:
        """Build a desktop OAuth flow from a downloaded client secrets file."""
        return InstalledAppFlow.from_client_secrets_file(
            client_secrets_file,
            scopes=self.flow_scopes(),
        )

    def authorization_url(self, flow: Flow, **kwargs) -> tuple:
        """
        Get the Google consent URL for a flow, including custom parameters.

        Returns:
            (authorization_url, state) tuple from the flow
        """
        params = {**self._custom_parameters, **kwargs}
        return flow.authorization_url(**params)

    @classmethod
    def credential(cls, id_token: Optional[str] = None, access_token: Optional[str] = None) -> OAuthCredential:
        """
        Build a credential from Google tokens.

        Args:
            id_token: Google ID token
            access_token: Google OAuth access token

        Returns:
            OAuthCredential for FirebaseAuthClient.sign_in_with_credential
        """
        if not id_token and not access_token:
            raise ValueError("Either id_token or access_token is required")
        return OAuthCredential(provider_id=cls.PROVIDER_ID, id_token=id_token, access_token=access_token)
