"""
Dedicated per-session log files for the effect engine.

Every effect module logs through a named logger under the "effect" namespace.
While a session is open, each channel writes DEBUG and up into its own file
inside the session directory, and the "effect" namespace logger holds one
shared console handler for warnings. Records stop at the namespace logger so
the host's root configuration does not print them a second time.

Log Files:
- sensor.log: capability probe, subscriptions, source mode changes
- permission.log: consent flow transitions and failures
- flicker.log: flicker timer lifecycle
- renderer.log: state delivery and renderer failures

Usage:
    from core.telemetry.loggers.effect_logger import get_effect_logger

    effect_logger = get_effect_logger(session_dir=telemetry.get_session_dir())
    effect_logger.sensor.debug("Subscribed")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Tuple

NAMESPACE = "effect"

CHANNELS = {
    "sensor": "sensor.log",
    "permission": "permission.log",
    "flicker": "flicker.log",
    "renderer": "renderer.log",
}

FORMATTER = logging.Formatter(
    '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)


class EffectLogger:
    """Singleton router from effect.* loggers to session files."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Path = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Path = None):
        if self._initialized:
            return

        if session_dir is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_dir = Path("logs") / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        # (logger, handler) pairs owned by this session, removed on close()
        self._owned: List[Tuple[logging.Logger, logging.Handler]] = []

        namespace = logging.getLogger(NAMESPACE)
        namespace.setLevel(logging.DEBUG)
        namespace.propagate = False
        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(FORMATTER)
        self._own(namespace, console)

        for name, filename in CHANNELS.items():
            setattr(self, name, self._open_channel(name, filename))

        self._initialized = True

    def _own(self, logger: logging.Logger, handler: logging.Handler) -> None:
        logger.addHandler(handler)
        self._owned.append((logger, handler))

    def _open_channel(self, name: str, filename: str) -> logging.Logger:
        logger = logging.getLogger(f"{NAMESPACE}.{name}")
        logger.setLevel(logging.DEBUG)

        fh = logging.FileHandler(self.log_dir / filename, mode='w')
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(FORMATTER)
        self._own(logger, fh)
        return logger

    def paths(self) -> Dict[str, Path]:
        """Log file per channel."""
        return {name: self.log_dir / filename for name, filename in CHANNELS.items()}

    def close(self):
        """Detach and close the session handlers, handing records back to the root logger."""
        for logger, handler in self._owned:
            logger.removeHandler(handler)
            handler.close()
            logger.setLevel(logging.NOTSET)
        self._owned = []
        logging.getLogger(NAMESPACE).propagate = True


_effect_logger = None


def get_effect_logger(session_dir: Path = None) -> EffectLogger:
    """Get or create effect logger instance."""
    global _effect_logger
    if _effect_logger is None:
        _effect_logger = EffectLogger(session_dir=session_dir)
    return _effect_logger


def reset_effect_logger() -> None:
    """Close the current instance so the next call starts a new session."""
    global _effect_logger
    if _effect_logger is not None:
        _effect_logger.close()
    EffectLogger._instance = None
    EffectLogger._initialized = False
    _effect_logger = None
