import json
import logging
import datetime

class JSONFormatter(logging.Formatter):
    """
    Emits one JSON object per log record, carrying the request context
    attached by LoggingMiddleware when present.
    """
    CONTEXT_FIELDS = ("request_id", "principal_id", "role", "merchant_id", "execution_time_ms")

    def format(self, record):
        log_record = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        for field in self.CONTEXT_FIELDS:
            log_record[field] = getattr(record, field, "N/A")

        # masked request headers, attached for 4xx/5xx responses
        if hasattr(record, "headers"):
            log_record["headers"] = record.headers

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)
