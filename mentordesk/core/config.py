# mentordesk/core/config.py
from typing import List, Literal, Optional, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator


class Settings(BaseSettings):
    # ==== Infrastructure ====
    database_url: str = "postgresql+asyncpg://app:app@db:5432/mentordesk"
    redis_url: str = "redis://redis:6379/0"

    # sql = durable store, memory = ephemeral in-process store
    storage_backend: Literal["sql", "memory"] = "sql"

    # background = asyncio task in the API process, rq = Redis queue + worker
    notification_backend: Literal["background", "rq"] = "background"
    notifications_queue: str = "notifications"

    # seed the demo mentors into an empty store at startup
    seed_demo_mentors: bool = False

    # ==== Answer workflow ====
    # True keeps overwrite-on-reanswer; False answers 409 for Resolved questions
    allow_reanswer: bool = True

    # ==== Auth stub ====
    # static staff token; mentors use "mentor-<id>"
    admin_token: str = "dev-token"

    # ==== Email ====
    email_provider: Literal["console", "smtp", "sendgrid"] = "console"
    email_from: str = "noreply@mentordesk.local"
    email_reply_to: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    sendgrid_api_key: Optional[str] = None

    # ==== CORS ====
    # CORS_ORIGINS=http://localhost:5173,http://127.0.0.1:5173,...
    cors_origins: Union[str, List[str]] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ]

    # ==== Logging / environment ====
    env: str = "dev"          # dev|staging|prod
    log_level: str = "INFO"   # DEBUG|INFO|WARNING|ERROR

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                try:
                    import json
                    parsed = json.loads(s)
                    return [str(i).strip() for i in parsed if str(i).strip()]
                except ValueError:
                    pass
            return [i.strip() for i in s.split(",") if i.strip()]
        return v

    @model_validator(mode="after")
    def _check_backends(self):
        # the RQ worker runs in another process and cannot see memory storage
        if self.notification_backend == "rq" and self.storage_backend == "memory":
            raise ValueError("notification_backend=rq requires storage_backend=sql")
        return self


settings = Settings()
