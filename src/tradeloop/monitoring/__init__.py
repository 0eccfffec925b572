"""Monitoring package: logging and operator alerts."""

from tradeloop.monitoring.alerts import (
    AlertSink,
    build_critical_alert_body,
    critical_alert_subject,
    format_failure_details,
)
from tradeloop.monitoring.logger import setup_logging
from tradeloop.monitoring.telegram import TelegramNotifier

__all__ = [
    "AlertSink",
    "TelegramNotifier",
    "build_critical_alert_body",
    "critical_alert_subject",
    "format_failure_details",
    "setup_logging",
]
