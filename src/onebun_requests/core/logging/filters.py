"""Log filters: ambient trace id and static extra fields."""

import logging
from typing import Any, Mapping

from ..context import get_trace_id


class TraceIdFilter(logging.Filter):
    """
    Add the ambient trace id (``set_trace_id``) as ``record.trace_id``.

    Records that already carry ``trace_id`` (passed as a field) keep it.

    Example:
        >>> handler.addFilter(TraceIdFilter())
        >>> token = set_trace_id("abc123")
        >>> logger.info("Request started")  # trace_id=abc123
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "trace_id", None) is None:
            trace_id = get_trace_id()
            if trace_id:
                record.trace_id = trace_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """Add static fields (service name, environment, ...) to every record."""

    def __init__(self, extra_fields: Mapping[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
