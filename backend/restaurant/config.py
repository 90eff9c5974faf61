"""
restaurant/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and lazily initializes the Firebase Admin SDK (Firestore DB) using the provided credentials.
Routers receive the Firestore client through the `get_db` dependency so it can be
swapped out in tests.
"""
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    firebase_cred_file: str = Field('firebase_service_account.json')
    firebase_project_id: str = Field(...)

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_client_id: Optional[str] = None
    firebase_auth_uri: Optional[str] = None
    firebase_token_uri: Optional[str] = None
    firebase_auth_provider_x509_cert_url: Optional[str] = None
    firebase_client_x509_cert_url: Optional[str] = None

    # Every collection name gets this prefix (staging/test isolation)
    firebase_collection_prefix: str = ""

    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = Field('*')  # Comma-separated list or '*' for all
    currency: str = "USD"

    # Accept `mock_jwt_token_<role>_<uid>` bearer tokens (local development only)
    allow_mock_tokens: bool = False

    def has_env_credentials(self) -> bool:
        return all([
            self.firebase_private_key_id,
            self.firebase_private_key,
            self.firebase_client_email,
            self.firebase_client_id,
            self.firebase_auth_uri,
            self.firebase_token_uri,
            self.firebase_auth_provider_x509_cert_url,
            self.firebase_client_x509_cert_url,
        ])

    def credential_source(self):
        """Service account dict (Cloud Run) or path to the credential file (local)."""
        if self.has_env_credentials():
            return {
                "type": "service_account",
                "project_id": self.firebase_project_id,
                "private_key_id": self.firebase_private_key_id,
                # .env files usually carry the key with escaped newlines
                "private_key": self.firebase_private_key.replace("\\n", "\n"),
                "client_email": self.firebase_client_email,
                "client_id": self.firebase_client_id,
                "auth_uri": self.firebase_auth_uri,
                "token_uri": self.firebase_token_uri,
                "auth_provider_x509_cert_url": self.firebase_auth_provider_x509_cert_url,
                "client_x509_cert_url": self.firebase_client_x509_cert_url,
            }
        return self.firebase_cred_file

    def origins(self) -> list[str]:
        if not self.allowed_origins or self.allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


# Load settings from environment (.env file, etc.)
settings = Settings()

_db = None


def get_firebase_app():
    """Initialize the default Firebase app once; reuse it afterwards."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    cred = credentials.Certificate(settings.credential_source())
    try:
        return firebase_admin.initialize_app(cred, {"projectId": settings.firebase_project_id})
    except ValueError as e:
        if "already exists" in str(e):
            # Firebase app already initialized, get the default app
            return firebase_admin.get_app()
        raise


def get_db():
    """FastAPI dependency returning the shared Firestore client."""
    global _db
    if _db is None:
        _db = firestore.client(app=get_firebase_app())
    return _db


def collection_name(name: str) -> str:
    prefix = (settings.firebase_collection_prefix or "").strip()
    return f"{prefix}{name}" if prefix else name
