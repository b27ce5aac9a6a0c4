"""
Structured logging for outbound API calls and webhook checks.

Single contract for every event:
- component ("monobank", "webhook")
- operation (HTTP method + path, or "verify")
- outcome ("success", "failed", "rejected")
- status_code (optional)
- duration_ms (optional, omitted if None)
- reason (optional)

Never pass the X-Token value, signatures or full bodies here.
"""
import time
from logging import Logger
from typing import Optional


def elapsed_ms(started_at: float) -> int:
    """Milliseconds since a time.monotonic() reading."""
    return int((time.monotonic() - started_at) * 1000)


def log_event(
    logger: Logger,
    *,
    component: str,
    operation: str,
    outcome: str,
    status_code: Optional[int] = None,
    duration_ms: Optional[int] = None,
    reason: Optional[str] = None,
    level: str = "info",
) -> None:
    """
    Emit one structured event.

    The message mirrors the bracketed key=value format used in plain log
    lines, and the same fields are attached as `extra` for JSON formatters.

    Args:
        logger: Logger instance
        component: Component name
        operation: Operation name (e.g. "GET /api/merchant/details")
        outcome: Outcome of the operation
        status_code: HTTP status, when there was a response
        duration_ms: Duration in milliseconds
        reason: Short non-PII explanation
        level: Log level name ("info", "warning", "error", "debug")
    """
    extra: dict = {
        "component": component,
        "operation": operation,
        "outcome": outcome,
    }
    parts = [f"operation={operation}", f"outcome={outcome}"]
    if status_code is not None:
        extra["status_code"] = status_code
        parts.append(f"status={status_code}")
    if duration_ms is not None:
        extra["duration_ms"] = duration_ms
        parts.append(f"duration_ms={duration_ms}")
    if reason is not None:
        extra["reason"] = reason
        parts.append(f"reason={reason}")

    msg = f"{component.upper()}_EVENT [{', '.join(parts)}]"
    log_method = getattr(logger, level.lower(), logger.info)
    log_method(msg, extra=extra)
