"""Secret Manager reader for the Firebase web config.

Keeps the web config out of source control: the whole console JSON object
lives in one secret and is read at bootstrap.
"""

import json
import logging
from typing import Optional

from google.api_core import exceptions
from google.cloud import secretmanager

from config import ConfigError, FirebaseConfig

logger = logging.getLogger(__name__)


class SecretManagerClient:
    """Reads secrets from Google Secret Manager."""

    def __init__(self, project_id: str):
        """Initialize Secret Manager client.

        Args:
            project_id: GCP project holding the secrets
        """
        self.client = secretmanager.SecretManagerServiceClient()
        self.project_id = project_id

    def _version_path(self, secret_id: str, version: str = "latest") -> str:
        return f"projects/{self.project_id}/secrets/{secret_id}/versions/{version}"

    def get_secret(self, secret_id: str, version: str = "latest") -> Optional[str]:
        """Read one version of a secret as text.

        Returns:
            Secret value, or None if it is missing or not readable
        """
        try:
            response = self.client.access_secret_version(name=self._version_path(secret_id, version))
        except exceptions.NotFound:
            logger.warning(f"Secret not found: {secret_id}")
            return None
        except exceptions.PermissionDenied:
            logger.error(f"Permission denied for secret: {secret_id}")
            return None
        return response.payload.data.decode("UTF-8")

    def get_firebase_config(self, secret_id: str) -> Optional[FirebaseConfig]:
        """Read a Firebase web config secret.

        Returns:
            FirebaseConfig or None if the secret is not found

        Raises:
            ConfigError: The secret is not a JSON object
        """
        raw = self.get_secret(secret_id)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Secret {secret_id} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Secret {secret_id} must hold a JSON object")
        return FirebaseConfig.from_dict(data)
