from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as pkg_version
from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _package_version(default: str = "0.1.0") -> str:
    try:
        return pkg_version("oauth-verifier")
    except PackageNotFoundError:
        return default


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    reload: bool = False
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"


class CorsSettings(BaseModel):
    allow_origins: str = "*"  # comma-separated or "*"
    allow_methods: str = "GET,POST"  # comma-separated
    allow_headers: str = "*"  # comma-separated or "*"

    def origins(self) -> List[str]:
        value = self.allow_origins.strip()
        if value in ("", "*"):
            return ["*"]
        return [part.strip() for part in value.split(",") if part.strip()]

    def methods(self) -> List[str]:
        value = self.allow_methods.strip()
        return [part.strip().upper() for part in value.split(",") if part.strip()]

    def headers(self) -> List[str]:
        value = self.allow_headers.strip()
        if value in ("", "*"):
            return ["*"]
        return [part.strip() for part in value.split(",") if part.strip()]


class HttpSettings(BaseModel):
    # Used when a request carries no timeout of its own
    default_timeout: float = 5.0
    # Key fetch, code exchange, refresh, revoke and profile calls
    provider_timeout: float = 30.0
    proxy_url: Optional[str] = None


class KeyCacheSettings(BaseModel):
    # 0 disables caching: keys are fetched on every verification
    ttl_seconds: float = 0.0


class ClaimsSettings(BaseModel):
    validate_claims: bool = False
    leeway_seconds: int = 0


class ProviderCredentials(BaseModel):
    client_id: str = ""
    client_secret: str = ""
    redirect_url: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class AppleSettings(ProviderCredentials):
    keys_url: str = "https://appleid.apple.com/auth/keys"
    token_url: str = "https://appleid.apple.com/auth/token"
    revoke_url: str = "https://appleid.apple.com/auth/revoke"


class LineSettings(ProviderCredentials):
    base_url: str = "https://api.line.me"


class LoggingSettings(BaseModel):
    as_json: bool = False


class Settings(BaseSettings):
    """Application settings loaded from environment (and .env)."""

    # App metadata
    app_name: str = "OAuth Verifier"
    app_version: str = Field(default_factory=_package_version)

    # Groups
    server: ServerSettings = ServerSettings()
    cors: CorsSettings = CorsSettings()
    http: HttpSettings = HttpSettings()
    key_cache: KeyCacheSettings = KeyCacheSettings()
    claims: ClaimsSettings = ClaimsSettings()
    apple: AppleSettings = AppleSettings()
    line: LineSettings = LineSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_prefix="OAUTH_VERIFIER_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
