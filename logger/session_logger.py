import json
import os
from datetime import datetime
from typing import Optional

from loguru import logger as loguru_logger


class SessionLogger:
    """Per-run log file that mirrors loguru output.

    Each session writes ``plugin_session_<timestamp>.log`` under ``log_dir``
    with start and end markers around everything logged in between.
    """

    def __init__(self, log_dir: str = "logs/sessions", level: str = "INFO"):
        """Initialize session logger.

        Args:
            log_dir: Directory for session logs
            level: Minimum level mirrored from loguru into the session file
        """
        self.log_dir = log_dir
        self.level = level
        os.makedirs(self.log_dir, exist_ok=True)

        # Filename uses minute_hour_day_month_year
        timestamp = datetime.now().strftime("%M_%H_%d_%m_%Y")
        self.log_path = os.path.join(self.log_dir, f"plugin_session_{timestamp}.log")

        self._sink_id: Optional[int] = None
        self._ended: bool = False

    # ---------- Wiring ----------
    def attach_loguru_sink(self) -> None:
        """Attach a loguru sink to mirror all loguru logs to the session file."""
        if self._sink_id is None:
            self._sink_id = loguru_logger.add(
                self.log_path,
                format="[{time:YYYY-MM-DD HH:mm:ss}] {level}: {message}",
                level=self.level,
                encoding="utf-8",
            )

    def detach_loguru_sink(self) -> None:
        if self._sink_id is not None:
            try:
                loguru_logger.remove(self._sink_id)
            except ValueError:
                # Sink was already removed, e.g. by a later logger.remove()
                pass
            finally:
                self._sink_id = None

    # ---------- Public API ----------
    def log(self, message: str) -> None:
        """Log a message through loguru, which the session sink picks up."""
        loguru_logger.info(message)

    def log_start(self, config: Optional[dict] = None) -> None:
        """Attach the sink and write the session start marker.

        Args:
            config: Optional configuration dict to log at session start
        """
        self._ended = False
        self.attach_loguru_sink()
        self.log("=== SESSION START ===")
        if config is not None:
            self.log_kv("Configuration", config)

    def log_kv(self, key: str, value) -> None:
        """Log a key-value pair (e.g., configuration)."""
        try:
            value_str = json.dumps(value, indent=2) if isinstance(value, (dict, list)) else str(value)
        except (TypeError, ValueError):
            value_str = str(value)
        self.log(f"{key}: {value_str}")

    def log_end(self) -> None:
        """Mark session end and detach the sink (idempotent)."""
        if not self._ended and self._sink_id is not None:
            self._ended = True
            self.log("=== SESSION END ===")
            self.detach_loguru_sink()
