from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Keyword Chatbot"
    debug: bool = False

    # Storage
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "chatbot.db"

    # Chat
    max_message_length: int = 2000

    # Dashboard
    recent_chats_limit: int = 5
    popular_topics_limit: int = 5
    active_session_hours: int = 24

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "CHATBOT_",
    }


settings = Settings()
