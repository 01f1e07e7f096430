"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class IntakeConfig(BaseSettings):
    """Intake wizard configuration."""

    model_config = {"env_prefix": "HAUSEE_INTAKE_"}

    draft_key: str = "agentMatchingForm"
    drafts_dir: str = "data/drafts"
    autosave_delay_seconds: float = 0.5
    catalog_path: str | None = None


class VerificationConfig(BaseSettings):
    """Phone verification (serverless functions) configuration."""

    model_config = {"env_prefix": "HAUSEE_VERIFICATION_"}

    functions_url: str = "http://localhost:54321"
    anon_key: str | None = None
    timeout_seconds: int = 15


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "HAUSEE_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    intake: IntakeConfig = Field(default_factory=IntakeConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
