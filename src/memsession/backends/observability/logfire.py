"""Logfire-based observability backend.

Forwards memsession log records (errors, debug timings) to Logfire.
If Logfire is not configured, all functions are no-ops.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

_configured: bool = False


def configure() -> bool:
    """Configure Logfire and attach its handler to the memsession logger.

    Call once at process startup. Skips configuration when no token is
    present to avoid interactive prompts.

    Returns True if Logfire was configured, False otherwise (no-op).
    """
    global _configured
    if _configured:
        return True

    if not os.getenv("LOGFIRE_TOKEN"):
        _configured = True
        return False

    try:
        import logfire

        logfire.configure(send_to_logfire="if-token-present")
        logging.getLogger("memsession").addHandler(logfire.LogfireLoggingHandler())
        logger.info("Logfire configured for memsession logs")
        _configured = True
        return True
    except ImportError:
        logger.warning("LOGFIRE_TOKEN set but logfire is not installed. Run: uv sync --extra logfire")
        _configured = True
        return False
    except Exception as e:
        logger.warning("Failed to configure Logfire: %s", e)
        _configured = True
        return False


def reset() -> None:
    """Forget previous configuration (tests)."""
    global _configured
    _configured = False
