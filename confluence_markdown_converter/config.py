"""Settings for connecting to Confluence, read from the environment or a .env file."""

from typing import Literal

from pydantic import BaseModel
from pydantic import Field
from pydantic import SecretStr
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class RetryConfig(BaseModel):
    """Configuration for network retry behavior."""

    backoff_and_retry: bool = Field(
        default=True,
        description="Enable or disable automatic retry with exponential backoff on network errors.",
    )
    backoff_factor: int = Field(
        default=2,
        description="Multiplier for exponential backoff between retries.",
    )
    max_backoff_seconds: int = Field(
        default=60,
        description="Maximum number of seconds to wait between retries.",
    )
    max_backoff_retries: int = Field(
        default=5,
        description="Maximum number of retry attempts before giving up.",
    )
    retry_status_codes: list[int] = Field(
        default_factory=lambda: [413, 429, 502, 503, 504],
        description="HTTP status codes that should trigger a retry.",
    )


class ConfluenceSettings(BaseSettings):
    """Connection settings.

    Values come from ``CONFLUENCE_*`` environment variables or a ``.env`` file;
    keyword arguments passed to the constructor take precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONFLUENCE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    base_url: str = Field("", description="Base URL of the Confluence instance.")
    username: str = Field("", description="Username or email for API authentication.")
    api_token: SecretStr = Field(
        SecretStr(""),
        description="API token for Cloud, or password for Data Center/Server.",
    )
    type: Literal["cloud", "datacenter"] = Field("cloud", description="Deployment type.")
    timeout: int = Field(30, description="Request timeout in seconds.")
    retry_config: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slashes(cls, value: str) -> str:
        return value.strip().rstrip("/")

    def missing_credentials(self) -> list[str]:
        required = {
            "base URL": self.base_url,
            "username": self.username,
            "API token": self.api_token.get_secret_value(),
        }
        return [name for name, value in required.items() if not value]
