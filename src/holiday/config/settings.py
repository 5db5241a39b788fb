"""
Application settings using Pydantic.

Provides environment-based configuration loading with HOLIDAY_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HOLIDAY_",
        extra="ignore",
    )

    # Environment ("production" talks to AWS, anything else to LocalStack)
    environment: str = "development"
    localstack_endpoint: str = "http://localhost:4566"

    # AWS
    aws_region: str = "us-west-2"
    aws_max_attempts: int = 3

    # S3
    bucket_name: str = "sagebrush-public"

    # ALB
    alb_stack_name: str = "sagebrush-alb"
    listener_arn: str | None = None

    # Work mode turns bucket website hosting back off once routing is restored
    disable_hosting_on_work: bool = True

    # Work mode waits this long for ECS tasks before routing traffic to them
    service_timeout: int = 300
    service_interval: float = 10.0

    # Post-transition checks
    health_timeout: int = 300
    health_interval: float = 5.0
    http_timeout: float = 10.0

    @property
    def is_local(self) -> bool:
        return self.environment.lower() != "production"

    @property
    def endpoint_url(self) -> str | None:
        """Endpoint override for every AWS client, or None for real AWS."""
        return self.localstack_endpoint if self.is_local else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
