"""
Structured logging for the Product Scout extraction engine.

Every component logs through a LayerLogger bound to its component name. A
per-request trace id is attached to each entry so one extraction can be
followed across detection, field extraction and classification.
"""
import uuid
import logging
import structlog
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

from product_scout.config import config

# Context variable for trace ID
trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """Get current trace ID or generate new one."""
    trace_id = trace_id_var.get()
    if not trace_id:
        trace_id = str(uuid.uuid4())[:8]
        trace_id_var.set(trace_id)
    return trace_id


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Start a new trace (one per API request)."""
    new_trace_id = trace_id or str(uuid.uuid4())[:8]
    trace_id_var.set(new_trace_id)
    return new_trace_id


def add_trace_id(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Processor to add trace ID to all log entries."""
    event_dict["trace_id"] = get_trace_id()
    return event_dict


def truncate_values(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Processor that shortens long string values.

    Candidate texts and descriptions can be whole page sections; log lines
    keep only their head.
    """
    limit = config.LOG_VALUE_LIMIT
    for key, value in event_dict.items():
        if key != "event" and isinstance(value, str) and len(value) > limit:
            event_dict[key] = value[:limit] + "..."
    return event_dict


def configure_logging():
    """Configure structlog with appropriate processors."""
    processors = [
        structlog.contextvars.merge_contextvars,
        add_trace_id,
        structlog.processors.add_log_level,
        truncate_values,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if config.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)


class LayerLogger:
    """
    Component logger for detectors, extractors and the coordinator.

    Entries carry `component=<name>`; the helpers below fix the event names
    so fallbacks and decisions can be filtered across components.
    """

    def __init__(self, layer_name: str):
        self.layer_name = layer_name
        self.logger = get_logger(layer_name).bind(component=layer_name)

    def log_decision(self, decision: str, reason: str, url: Optional[str] = None, **extra):
        """A routing or selection decision."""
        self.logger.info("decision_made", decision=decision, reason=reason, url=url, **extra)

    def log_action(self, action: str, status: str = "started", **extra):
        self.logger.info(f"action_{status}", action=action, **extra)

    def log_fallback(self, from_source: str, to_source: str, reason: str, **extra):
        """One source in a fallback chain gave up; the next one takes over."""
        self.logger.warning(
            "fallback_triggered",
            from_source=from_source,
            to_source=to_source,
            reason=reason,
            **extra
        )

    def log_error(self, error: str, error_type: str = "unknown", **extra):
        """A recovered error. Callers log here instead of raising."""
        self.logger.error("error_occurred", error=error, error_type=error_type, **extra)

    def log_extraction(
        self,
        parsed_by: str,
        fields_present: List[str],
        fields_missing: List[str],
        **extra
    ):
        """Which record fields an extractor filled."""
        self.logger.info(
            "product_extracted",
            parsed_by=parsed_by,
            fields_present=fields_present,
            fields_missing=fields_missing,
            completeness=f"{len(fields_present)}/{len(fields_present) + len(fields_missing)}",
            **extra
        )

    def log_classification(
        self,
        result: str,
        reason: str,
        signals_used: List[str],
        signals_blocked: List[str],
        **extra
    ):
        """Product-page verdict with the signals behind it."""
        self.logger.info(
            "page_classified",
            result=result,
            reason=reason,
            signals_used=signals_used,
            signals_blocked=signals_blocked,
            signal_count=len(signals_used),
            **extra
        )


# Initialize logging on module import
configure_logging()
