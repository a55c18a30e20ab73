from __future__ import annotations

import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env (if present)
load_dotenv()

# Reserved scheme for browser-chrome action bookmarks
ACTION_SCHEME = "ucjs:"


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip() == "1"


class Settings(BaseModel):
    # YAML file with keyword bookmarks
    keywords_file: str = os.getenv(
        "KEYWORDS_FILE", os.path.join(os.path.dirname(os.path.dirname(__file__)), "keywords.yml")
    )

    # Placeholder for the typed search string inside ucjs: bookmarks.
    # Literal text, not a regex.
    search_placeholder: str = os.getenv("KEYWORD_PLACEHOLDER", "%{searchString}")

    # Icon shown on action results
    result_icon_url: str = os.getenv(
        "RESULT_ICON_URL", "chrome://devtools/skin/images/command-console.svg"
    )

    # Label shown next to action results (instead of "Visit" or "Search")
    result_action_label: str = os.getenv("RESULT_ACTION_LABEL", "Execute")

    # API key for this FastAPI server (sent via X-API-Key header)
    api_key: str = os.getenv("KEYWORD_API_KEY", "")

    # CORS origins (comma-separated or "*")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    # Running ucjs: actions from /pick is off unless explicitly enabled
    enable_action_execution: bool = _env_flag("ENABLE_ACTION_EXECUTION")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # HTML view
    css_theme: str = os.getenv("CSS_THEME", "light")
    mobile_optimized: bool = _env_flag("MOBILE_OPTIMIZED", "1")
    html_font_size: str = os.getenv("HTML_FONT_SIZE", "16px")
    html_max_width: str = os.getenv("HTML_MAX_WIDTH", "860px")


settings = Settings()
