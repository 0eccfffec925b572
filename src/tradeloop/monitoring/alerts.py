"""Critical alert content and the alert sink interface."""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

CRITICAL_ALERT_SUBJECT_TEMPLATE = "CRITICAL Alert message from {bot_name}"


@runtime_checkable
class AlertSink(Protocol):
    """Delivers operator alerts. Best effort: implementations never raise."""

    async def send(self, subject: str, body: str) -> bool:
        """Deliver an alert. Returns True if it was sent."""


def critical_alert_subject(bot_name: str) -> str:
    return CRITICAL_ALERT_SUBJECT_TEMPLATE.format(bot_name=bot_name)


def format_failure_details(message: str, exc: BaseException) -> str:
    """Append the exception text and its cause to a failure message."""
    cause = exc.__cause__ or exc.__context__
    return f"{message} Details: {exc} Cause: {cause!r}"


def build_critical_alert_body(
    adapter_name: str,
    details: str,
    exc: BaseException | None = None,
    event_time: datetime | None = None,
) -> str:
    """Build the plain-text body of a critical alert."""
    event_time = event_time or datetime.now(timezone.utc)
    sections = [
        "A CRITICAL error event has occurred.",
        f"Exchange Adapter:\n{adapter_name}",
        f"Event Time:\n{event_time.isoformat()}",
        f"Event Details:\n{details}",
        "Take Action:\nCheck the bot logs for more information. The bot will shutdown NOW!",
    ]
    if exc is not None:
        stacktrace = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
        sections.append(f"Stacktrace:\n{stacktrace}")
    return "\n\n".join(sections) + "\n"
