"""
Configuration module for loading environment variables.
"""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    db_url: str

    # ElevenLabs (voice platform)
    elevenlabs_api_key: str
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_language: str = "en"
    default_first_message: str = "Hello! How can I help you?"

    # DigitalOcean (cloud platform)
    digitalocean_api_token: str
    digitalocean_base_url: str = "https://api.digitalocean.com/v2"

    # Bridge template deployed for every published agent
    bridge_repo: str = "abetancurultim/agent-bridge-template"
    bridge_branch: str = "main"
    bridge_region: str = "nyc"
    bridge_service_name: str = "bridge-service"
    bridge_run_command: str = "npm start"
    bridge_environment_slug: str = "node-js"
    bridge_instance_size: str = "basic-xxs"
    bridge_http_port: int = 8080

    # Bridge provisioning poll (5 minute ceiling by default)
    bridge_poll_interval: float = 5.0
    bridge_poll_max_attempts: int = 60

    # Outbound HTTP
    http_timeout: float = 30.0
    tool_test_timeout: float = 10.0

    # Auth
    auth_secret_key: str
    auth_algorithm: str = "HS256"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8091
    debug: bool = False
    environment: str = "development"
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
