"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from credito_gateway.domain.models import EligibilityResult, ParecerFinal, ValidationResult


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "credito-gateway", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "credito-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_eligibility(request_id: str, result: EligibilityResult, duration_ms: float) -> None:
    """Log structured eligibility outcome for analysis"""
    logging.info(
        "Eligibility evaluated",
        extra={
            "request_id": request_id,
            "cliente_id": result.cliente_id,
            "step": "eligibility_complete",
            "aprovado": result.aprovado,
            "faixa": result.faixa_sugerida,
            "duration_ms": duration_ms,
        },
    )


def log_validation(request_id: str, result: ValidationResult, duration_ms: float) -> None:
    """Log structured batch validation outcome"""
    logging.info(
        "Batch validated",
        extra={
            "request_id": request_id,
            "cliente_id": result.cliente_id,
            "step": "validation_complete",
            "tipo_arquivo": result.tipo_arquivo,
            "total_notas": result.summary.total_notas,
            "percentual_valido": result.summary.percentual_valido,
            "tolerance_status": result.summary.status,
            "duration_ms": duration_ms,
        },
    )


def log_final_decision(request_id: str, session_id: str, parecer: ParecerFinal) -> None:
    """Log the recorded analyst decision"""
    logging.info(
        "Final decision recorded",
        extra={
            "request_id": request_id,
            "session_id": session_id,
            "cliente_id": parecer.validacao.cliente_id,
            "step": "final_decision",
            "decisao": parecer.decisao,
        },
    )
