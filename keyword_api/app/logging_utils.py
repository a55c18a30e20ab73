import logging
import time
from typing import Optional


def setup_logger(name: str = "keyword_api", level: str = "INFO") -> logging.Logger:
    """Setup standardized logger with UTF-8 support."""
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        # Bookmark titles and search strings can be any script
        if hasattr(handler.stream, 'reconfigure'):
            handler.stream.reconfigure(encoding='utf-8')

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def log_resolution(logger: logging.Logger,
                   session_id: str,
                   query: str,
                   keyword: Optional[str],
                   found: bool,
                   duration_ms: float,
                   is_action: bool = False,
                   had_placeholder: bool = False,
                   result_count: Optional[int] = None,
                   error: Optional[str] = None) -> None:
    """Log one address-bar query in a structured format."""

    log_data = {
        "session_id": session_id,
        "query": _truncate(query),
        "keyword": keyword,
        "found": found,
        "duration_ms": round(duration_ms, 1),
    }

    if found:
        log_data["kind"] = "action" if is_action else "conventional"
        if is_action:
            log_data["had_placeholder"] = had_placeholder

    if result_count is not None:
        log_data["results"] = result_count

    if error:
        log_data["error"] = error

    status_icon = "✅" if found else "❌"

    if error:
        logger.error(f"{status_icon} Keyword query: {log_data}")
    else:
        logger.info(f"{status_icon} Keyword query: {log_data}")


def _truncate(value: str, limit: int = 200) -> str:
    if value and len(value) > limit:
        return value[:limit - 3] + "..."
    return value


def create_session_id() -> str:
    """Create unique session ID for tracking."""
    return f"session_{int(time.time() * 1000)}"
