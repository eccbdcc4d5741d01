"""Application configuration loaded from environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Codes
    code_length: int = 8
    max_trimmed_code_length: int = 255
    secure_codes: bool = False
    max_generation_attempts: int = 5

    # Backing store: "memory" or "redis"
    store_backend: str = "memory"

    # Redis
    redis_host: str = "127.0.0.1"
    redis_port: int = 9379
    redis_namespace: str = "canonid"

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 9200
    log_level: str = "INFO"

    # Entity type declarations (relative to project root)
    types_file: str = "types.yaml"

    @property
    def project_root(self) -> Path:
        return Path(__file__).parent.parent.parent

    model_config = {"env_file": ".env", "env_prefix": "", "extra": "ignore"}


settings = Settings()
