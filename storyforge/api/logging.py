"""Structured logging infrastructure for the API layer and worker.

Provides JSON-formatted logging for production and human-readable
logging for development, plus a StoryLogger helper for pipeline events.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Extra record attributes copied into JSON output when present
EXTRA_FIELDS = (
    "story_id",
    "stage",
    "status",
    "duration",
    "attempt",
    "prompt_index",
    "error_type",
    "failed_at_stage",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


class StoryLogger:
    """Logger for pipeline events with structured fields."""

    def __init__(self):
        self.logger = logging.getLogger("story_generation")

    def generation_started(self, story_id: str, stage: str) -> None:
        self.logger.info(
            f"Generation started: {stage}",
            extra={"story_id": story_id, "stage": stage},
        )

    def status_changed(self, story_id: str, status: str) -> None:
        self.logger.info(
            f"Status changed to {status}",
            extra={"story_id": story_id, "status": status},
        )

    def stage_completed(self, story_id: str, stage: str, duration: Optional[float] = None) -> None:
        extra = {"story_id": story_id, "stage": stage}
        if duration:
            extra["duration"] = round(duration, 2)
        self.logger.info(f"Stage completed: {stage}", extra=extra)

    def image_failed(self, story_id: str, prompt_index: int, error: Exception) -> None:
        self.logger.warning(
            f"Image {prompt_index + 1} failed: {error}",
            extra={
                "story_id": story_id,
                "stage": "assets",
                "prompt_index": prompt_index,
                "error_type": type(error).__name__,
            },
        )

    def retry_attempt(self, story_id: str, stage: str) -> None:
        self.logger.info(
            f"Retrying {stage} after a failed run",
            extra={"story_id": story_id, "stage": stage},
        )

    def generation_completed(self, story_id: str, stage: str, duration: float) -> None:
        self.logger.info(
            f"Generation completed: {stage}",
            extra={"story_id": story_id, "stage": stage, "duration": round(duration, 2)},
        )

    def generation_failed(self, story_id: str, error: Exception, stage: Optional[str] = None) -> None:
        extra = {"story_id": story_id, "stage": "failed", "error_type": type(error).__name__}
        if stage:
            extra["failed_at_stage"] = stage
        self.logger.error(f"Generation failed: {error}", extra=extra, exc_info=error)


# Global story logger instance
story_logger = StoryLogger()
