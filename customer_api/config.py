"""Runtime configuration for the API server and the console client."""

from __future__ import annotations

from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values from a .env in the working directory become process environment.
load_dotenv()


class Settings(BaseSettings):
    """Server settings, read from ``CUSTOMER_API_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CUSTOMER_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_token: Optional[str] = "ThisIsANewToken"
    seed_demo_data: bool = True
    seed_customer_count: int = 50
    seed_random_seed: Optional[int] = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5000
    title: str = "Customer API"


class ClientSettings(BaseSettings):
    """Console client settings, read from ``CUSTOMER_API_CLIENT_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="CUSTOMER_API_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = "http://127.0.0.1:5000"
    api_token: Optional[str] = "ThisIsANewToken"
    show_full_stack_trace: bool = False
    timeout_seconds: float = 30.0


__all__ = ["Settings", "ClientSettings"]
