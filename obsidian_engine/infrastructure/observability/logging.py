"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from obsidian_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name
        log_record["engine_version"] = settings.engine_version


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


def log_affordability_decision(
    request_id: str,
    user_id: Optional[str],
    decision: str,
    risk_level: str,
    confidence: float,
    duration_ms: float,
) -> None:
    """Log structured affordability outcome for analysis"""
    logging.info(
        "Affordability decision completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "affordability_complete",
            "decision": decision,
            "risk_level": risk_level,
            "confidence": round(confidence, 4),
            "duration_ms": duration_ms,
        },
    )


def log_payoff_plan(
    request_id: str,
    user_id: Optional[str],
    recommended_strategy: Optional[str],
    total_months: int,
    debt_count: int,
    duration_ms: float,
) -> None:
    """Log structured payoff plan outcome for analysis"""
    logging.info(
        "Payoff plan completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "payoff_plan_complete",
            "recommended_strategy": recommended_strategy,
            "total_months": total_months,
            "debt_count": debt_count,
            "duration_ms": duration_ms,
        },
    )
