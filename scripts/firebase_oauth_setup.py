#!/usr/bin/env python3
"""
Google sign-in check for the Firebase backend.

Runs the Google OAuth flow with the backend's sign-in provider (which
requests Gmail read-only access), signs in to Firebase with the resulting
Google ID token and prints the Firebase user plus the Google refresh token.

Usage:
    python3 scripts/firebase_oauth_setup.py /path/to/client_secret.json

Prerequisites:
    1. FIREBASE_* variables set in .env (see .env.example)
    2. Google sign-in enabled under Firebase console > Authentication
    3. An OAuth 2.0 client (Desktop app type) in the same Google Cloud project
    4. The client's JSON file downloaded
"""

import json
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from config import Config
from gcp import FirebaseAuthError, get_clients


def main():
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if len(sys.argv) < 2:
        print("Usage: python3 scripts/firebase_oauth_setup.py /path/to/client_secret.json")
        print()
        print("Download your OAuth client from Google Cloud Console:")
        print("  1. Go to https://console.cloud.google.com")
        print("  2. Select the Firebase project")
        print("  3. Go to APIs & Services > Credentials")
        print("  4. Create OAuth client ID (Desktop app)")
        print("  5. Download JSON file")
        sys.exit(1)

    credentials_path = Path(sys.argv[1])

    if not credentials_path.exists():
        print(f"Error: Credentials file not found: {credentials_path}")
        sys.exit(1)

    missing = Config.validate()
    if missing:
        print(f"Error: Missing required configuration: {', '.join(missing)}")
        print("Set these environment variables or add them to .env")
        sys.exit(1)

    with open(credentials_path) as f:
        creds_data = json.load(f)
    if "installed" not in creds_data and "web" not in creds_data:
        print("Error: Invalid credentials file format")
        print("Expected 'installed' or 'web' credentials")
        sys.exit(1)

    clients = get_clients()
    provider = clients.provider

    print("=" * 60)
    print("Firebase Google Sign-In")
    print("=" * 60)
    print()
    print(f"Project: {clients.config.project_id}")
    print("Requested scopes:")
    for scope in provider.flow_scopes():
        print(f"  {scope}")
    print()
    print("This script will open a browser window for Google sign-in.")
    print()

    flow = provider.create_installed_app_flow(str(credentials_path))
    google_credentials = flow.run_local_server(
        port=8080,
        prompt="consent",
        access_type="offline",  # Required to get refresh token
    )

    try:
        session = clients.auth.sign_in_with_google_credentials(google_credentials)
    except FirebaseAuthError as e:
        print(f"Error: Firebase rejected the Google sign-in: {e.code}")
        if e.message:
            print(f"  {e.message}")
        sys.exit(1)

    print()
    print("=" * 60)
    print("SUCCESS! Signed in to Firebase")
    print("=" * 60)
    print()
    print(f"Firebase UID:   {session.uid}")
    print(f"Email:          {session.email}")
    print(f"New user:       {session.is_new_user}")
    print(f"Token expires:  {session.expires_at.isoformat()}")
    if google_credentials.refresh_token:
        print(f"Google refresh token: {google_credentials.refresh_token}")
    else:
        print()
        print("Warning: No Google refresh token received.")
        print("Remove the app at https://myaccount.google.com/permissions and run again.")
    print()
    print("=" * 60)


if __name__ == "__main__":
    main()
