"""Shared test setup — repo root on sys.path, test-safe settings."""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Force test-safe settings before any module imports Settings()
os.environ["WSAUTH_URL"] = "https://wsauth.dev"
os.environ["WSAUTH_AUTH_SECRET_KEY"] = "test-secret-key-for-jwt-signing-32b"
os.environ["WSAUTH_EMAIL_PROVIDER"] = "console"
os.environ["WSAUTH_SUBDOMAINS_ENABLED"] = "false"
