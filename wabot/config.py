from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./wabot.db"
    debug: bool = False
    log_level: str = "INFO"

    default_language: str = "es"
    max_message_length: int = 4000

    openai_api_key: Optional[str] = None
    openai_assistant_id: Optional[str] = None
    openai_completion_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0
    assistant_run_timeout_seconds: float = 60.0
    assistant_poll_interval_seconds: float = 1.0

    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None
    twilio_validate_signature: bool = True
    use_mock_messenger: bool = False

    calendar_timezone: str = "America/Argentina/Buenos_Aires"
    calendar_start_hour: int = 10
    calendar_end_hour: int = 18
    calendar_slot_minutes: int = 30

    alert_bot_token: Optional[str] = None
    alert_chat_id: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
