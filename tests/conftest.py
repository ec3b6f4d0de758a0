"""Shared fixtures for the Firebase client tests."""

import os
import sys
from unittest.mock import MagicMock
from uuid import uuid4

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
from firebase_admin import credentials

from config import FirebaseConfig


@pytest.fixture
def firebase_config():
    return FirebaseConfig(
        api_key="test-api-key",
        auth_domain="demo-guard.firebaseapp.com",
        project_id="demo-guard",
        storage_bucket="demo-guard.firebasestorage.app",
        messaging_sender_id="1234567890",
        app_id="1:1234567890:web:abcdef",
    )


@pytest.fixture
def admin_credential():
    """Admin SDK credential that never loads real Google credentials."""
    return MagicMock(spec=credentials.Base)


@pytest.fixture
def app_name():
    return f"test-{uuid4().hex}"
