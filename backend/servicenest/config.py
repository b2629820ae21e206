"""
ServiceNest Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       coerces and validates them, and exposes a singleton `settings` object.
Who:   Imported by main.py, database.py and the identity provider adapter.
When:  Loaded once at import time; identity credentials are checked at startup.

Environment variable names match the ones the deployment already uses
(DB_USER, DB_PASS, PORT, FIREBASE_*), so an existing .env keeps working.
"""

from typing import Any, Dict, List
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults except the identity provider
    credentials, which must be supplied for protected routes to work.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Full connection string. When empty, it is assembled from the DB_* parts
    # below (the hosted deployment sets DB_SCHEME=mongodb+srv and DB_HOST to
    # the cluster address).
    mongodb_uri: str = Field(default="", description="Full MongoDB connection URI")
    db_scheme: str = Field(default="mongodb")
    db_user: str = Field(default="")
    db_pass: str = Field(default="")
    db_host: str = Field(default="localhost:27017")
    db_options: str = Field(default="retryWrites=true&w=majority")

    # Each collection lives in its own database
    services_db: str = Field(default="serviceDb")
    bookings_db: str = Field(default="bookingDb")
    messages_db: str = Field(default="messageDb")

    # Seconds the driver waits to find a usable server before failing an operation
    db_server_selection_timeout: int = Field(default=10, ge=1, le=120)

    # ── Identity provider (Firebase service account) ──────────────────────
    firebase_type: str = Field(default="service_account")
    firebase_project_id: str = Field(default="")
    firebase_private_key_id: str = Field(default="")
    firebase_private_key: str = Field(default="")
    firebase_client_email: str = Field(default="")
    firebase_client_id: str = Field(default="")
    firebase_auth_uri: str = Field(default="https://accounts.google.com/o/oauth2/auth")
    firebase_token_uri: str = Field(default="https://oauth2.googleapis.com/token")
    firebase_auth_provider_cert_url: str = Field(
        default="https://www.googleapis.com/oauth2/v1/certs"
    )
    firebase_client_cert_url: str = Field(default="")

    @field_validator("firebase_private_key")
    @classmethod
    def unescape_private_key(cls, v: str) -> str:
        """PEM keys are usually stored in .env with literal '\\n' sequences."""
        return v.replace("\\n", "\n")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def database_uri(self) -> str:
        """
        Connection string handed to the MongoDB client.

        Credentials are percent-escaped, which the driver requires for
        passwords containing '@', ':' or '/'.
        """
        if self.mongodb_uri:
            return self.mongodb_uri
        auth = ""
        if self.db_user:
            auth = f"{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}@"
        uri = f"{self.db_scheme}://{auth}{self.db_host}/"
        if self.db_options:
            uri += f"?{self.db_options}"
        return uri

    def firebase_credentials(self) -> Dict[str, Any]:
        """Service-account mapping in the shape firebase_admin.credentials.Certificate expects."""
        return {
            "type": self.firebase_type,
            "project_id": self.firebase_project_id,
            "private_key_id": self.firebase_private_key_id,
            "private_key": self.firebase_private_key,
            "client_email": self.firebase_client_email,
            "client_id": self.firebase_client_id,
            "auth_uri": self.firebase_auth_uri,
            "token_uri": self.firebase_token_uri,
            "auth_provider_x509_cert_url": self.firebase_auth_provider_cert_url,
            "client_x509_cert_url": self.firebase_client_cert_url,
        }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the identity provider credentials are configured.
        When:  Called during app startup (lifespan), before Firebase is initialized.
        Raises ValueError listing every missing variable.
        """
        required = {
            "FIREBASE_PROJECT_ID": self.firebase_project_id,
            "FIREBASE_PRIVATE_KEY": self.firebase_private_key,
            "FIREBASE_CLIENT_EMAIL": self.firebase_client_email,
        }
        errors = [f"{name} is not set" for name, value in required.items() if not value]
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()
