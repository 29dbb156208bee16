"""
JSON log formatting for contactgraph.

``configure_logging`` installs ``StructuredFormatter`` in production so
every line is a single JSON object a log shipper can index.
"""

import json
import logging
import socket
from datetime import datetime, timezone
from typing import Any, Optional

# Attributes every LogRecord carries; anything else came in via ``extra=``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Render a record as one line of JSON.

    Example::

        {"timestamp":"2026-02-08T12:00:00+00:00","level":"INFO",
         "logger":"contactgraph.api.graphql","message":"Contact ... created",
         "service":"contactgraph","environment":"production",
         "operation":"createContact","identity":"alice"}

    Scalar ``extra=`` values are copied into the object; ``operation``,
    ``identity`` and ``topic`` are the ones the code base uses.
    """

    def __init__(
        self,
        service_name: str = "contactgraph",
        environment: str = "development",
        include_timestamp: bool = True,
        include_hostname: bool = True,
        include_caller: bool = False,
        extra_fields: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.include_timestamp = include_timestamp
        self.include_caller = include_caller
        self.extra_fields = dict(extra_fields or {})
        self.hostname = socket.gethostname() if include_hostname else None

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}
        if self.include_timestamp:
            entry["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        entry.update(
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
            service=self.service_name,
            environment=self.environment,
        )
        if self.hostname:
            entry["hostname"] = self.hostname
        if self.include_caller:
            entry["caller"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        entry.update(self._extras(record, entry))
        entry.update(self.extra_fields)

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, separators=(",", ":"))

    @staticmethod
    def _extras(record: logging.LogRecord, taken: dict[str, Any]) -> dict[str, Any]:
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
            and key not in taken
            and not key.startswith("_")
            and (value is None or isinstance(value, (str, int, float, bool)))
        }
