from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env (if present)
load_dotenv()

PACKAGE_DIR = Path(__file__).parent


def _completion_api_key() -> str:
    for name in ("COMPLETION_API_KEY", "GROQ_API_KEY", "OPENAI_API_KEY"):
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


class Settings(BaseModel):
    # Prefix that marks a chat message as a command ("/gera o pdf ...")
    command_trigger: str = os.getenv("COMMAND_TRIGGER", "/")

    # OpenAI-compatible completion endpoint (Groq by default)
    completion_api_key: str = _completion_api_key()
    completion_base_url: str = os.getenv("COMPLETION_BASE_URL", "https://api.groq.com/openai/v1")
    completion_model: str = os.getenv("COMPLETION_MODEL", "llama-3.3-70b-versatile")
    completion_temperature: float = float(os.getenv("COMPLETION_TEMPERATURE", "0.3"))
    completion_max_tokens: int = int(os.getenv("COMPLETION_MAX_TOKENS", "512"))
    completion_timeout: float = float(os.getenv("COMPLETION_TIMEOUT", "30"))

    # Destination directory (YAML export of the destinations table)
    destinations_file: str = os.getenv("DESTINATIONS_FILE", "destinations.yml")

    # Navigation catalog offered to the completion service
    commands_file: str = os.getenv("COMMANDS_FILE", str(PACKAGE_DIR / "commands.yml"))

    # API key for this FastAPI server (sent via X-API-Key header)
    api_key: str = os.getenv("COMMANDER_API_KEY", "")

    # CORS origins (comma-separated or "*")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # HTML rendering of command results
    css_theme: str = os.getenv("CSS_THEME", "light")
    mobile_optimized: bool = os.getenv("MOBILE_OPTIMIZED", "true").strip().lower() in ("1", "true", "yes")
    html_font_size: str = os.getenv("HTML_FONT_SIZE", "16px")
    html_max_width: str = os.getenv("HTML_MAX_WIDTH", "800px")


settings = Settings()
