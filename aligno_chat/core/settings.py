from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_AI_CHAT_SYSTEM_PROMPT = (
    "You are Aligno's project assistant. Help the user plan projects, break work into tasks, "
    "run sprints and keep goals on track. Keep answers concise and actionable."
)


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    ai_chat_url: str = Field(default="http://localhost:8000/functions/v1/ai-chat", alias="AI_CHAT_URL")
    chat_access_token: str | None = Field(default=None, alias="CHAT_ACCESS_TOKEN")
    chat_user_id: str | None = Field(default=None, alias="CHAT_USER_ID")
    chat_stream_timeout_seconds: float = Field(default=60.0, alias="CHAT_STREAM_TIMEOUT_SECONDS")
    chat_stream_max_pending_retries: int | None = Field(default=None, alias="CHAT_STREAM_MAX_PENDING_RETRIES")

    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_anon_key: str | None = Field(default=None, alias="SUPABASE_ANON_KEY")
    chat_messages_table: str = Field(default="chat_messages", alias="CHAT_MESSAGES_TABLE")

    ai_gateway_base_url: str = Field(default="https://ai.gateway.lovable.dev/v1", alias="AI_GATEWAY_BASE_URL")
    ai_gateway_api_key: str | None = Field(default=None, alias="LOVABLE_API_KEY")
    ai_chat_model: str = Field(default="google/gemini-2.5-flash", alias="AI_CHAT_MODEL")
    ai_chat_system_prompt: str = Field(default=_DEFAULT_AI_CHAT_SYSTEM_PROMPT, alias="AI_CHAT_SYSTEM_PROMPT")
    provider_timeout_seconds: float = Field(default=60.0, alias="AI_GATEWAY_TIMEOUT_SECONDS")

    auth_jwt_secret: str = Field(default="dev-secret-change-me", alias="AUTH_JWT_SECRET")
    auth_jwt_algorithm: str = Field(default="HS256", alias="AUTH_JWT_ALGORITHM")
    auth_jwt_audience: str = Field(default="authenticated", alias="AUTH_JWT_AUDIENCE")

    cors_allowed_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOWED_ORIGINS")

    @property
    def enable_swagger(self) -> bool:
        return self.app_env.lower() == "local"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.app_env.lower() == "local" else "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
