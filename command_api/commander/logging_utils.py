import logging
import time
from typing import Optional


def setup_orchestrator_logger(name: str = "orchestrator", level: str = "INFO") -> logging.Logger:
    """Setup standardized logger for command processing with UTF-8 support."""
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        # Destination names carry accents (São Paulo, Aparecida...)
        if hasattr(handler.stream, 'reconfigure'):
            handler.stream.reconfigure(encoding='utf-8')

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def log_execution(logger: logging.Logger,
                  session_id: str,
                  command: str,
                  action_type: str,
                  understood: bool,
                  model: str,
                  success: bool,
                  duration_ms: float,
                  outcome: str,
                  actions_count: int = 0,
                  destination: Optional[str] = None,
                  error: Optional[str] = None) -> None:
    """Log one command invocation in a structured format."""

    log_data = {
        "session_id": session_id,
        "command": _truncate(command),
        "action_type": action_type,
        "understood": understood,
        "model": model,
        "outcome": outcome,
        "success": success,
        "actions": actions_count,
        "duration_ms": round(duration_ms, 1)
    }

    if destination:
        log_data["destination"] = destination

    if error:
        log_data["error"] = _truncate(error)

    status_icon = "✅" if success else "❌"
    outcome_desc = outcome.replace("_", " ").title()

    if error:
        logger.error(f"{status_icon} {outcome_desc}: {log_data}")
    else:
        logger.info(f"{status_icon} {outcome_desc}: {log_data}")


def _truncate(value: str, limit: int = 200) -> str:
    if value and len(value) > limit:
        return value[:limit - 3] + "..."
    return value


def create_session_id() -> str:
    """Create unique session ID for tracking."""
    return f"session_{int(time.time() * 1000)}"
