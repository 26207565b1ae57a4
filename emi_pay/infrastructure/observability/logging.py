"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from emi_pay.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transition(
    account_number: str | None,
    from_state: str,
    to_state: str,
    reason: str | None = None,
) -> None:
    """Log a payment workflow state change"""
    logging.getLogger("emi_pay.workflow").info(
        "Workflow transition",
        extra={
            "account_number": account_number,
            "step": "workflow_transition",
            "from_state": from_state,
            "to_state": to_state,
            "failure_reason": reason,
        },
    )


def log_payment_outcome(
    account_number: str,
    amount: Decimal,
    payment_id: str | None,
    status: str,
    duration_ms: float,
) -> None:
    """Log structured submission outcome for reconciliation"""
    logging.getLogger("emi_pay.workflow").info(
        "Payment submission completed",
        extra={
            "account_number": account_number,
            "step": "payment_submitted",
            "amount": str(amount),
            "payment_id": payment_id,
            "payment_status": status,
            "duration_ms": duration_ms,
        },
    )
