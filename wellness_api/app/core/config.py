"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can be started locally with an sqlite file and a blob directory
next to the project.  In a production deployment you should override
at least ``API_TOKEN`` and ``SIGNING_SECRET``.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Wellness API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Fixed prefix under which every route is mounted.
    api_prefix: str = os.getenv("API_PREFIX", "/api/v1")

    # The single static bearer token gating all requests.  Clients send it
    # as ``Authorization: Bearer <token>``.
    api_token: str = os.getenv("API_TOKEN", "change_me")

    # Path to the sqlite file backing the key/value store.  A relative
    # path is resolved against the project root by ``kv_store``.
    database_url: str = os.getenv("DATABASE_URL", "wellness.db")

    # Blob storage: ``local`` keeps photos on disk and signs URLs with
    # ``signing_secret``; ``s3`` uses an S3 bucket and presigned URLs.
    blob_backend: str = os.getenv("BLOB_BACKEND", "local")
    blob_dir: str = os.getenv("BLOB_DIR", "blobs")
    blob_bucket: str = os.getenv("BLOB_BUCKET", "wellness-memories")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    signing_secret: str = os.getenv("SIGNING_SECRET", "change_me")
    signed_url_ttl: int = int(os.getenv("SIGNED_URL_TTL", "3600"))

    aws_region: str = os.getenv("AWS_REGION", "")
    aws_access_key_id: str = os.getenv("AWS_ACCESS_KEY_ID", "")
    aws_secret_access_key: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")

    # Comma‑separated list of origins allowed by the CORS middleware.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
