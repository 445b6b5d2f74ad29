import json
import logging
import sys
import traceback
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class CustomJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs structured JSON logs.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'extra_data'):
            log_entry['data'] = record.extra_data

        return json.dumps(log_entry, ensure_ascii=False, cls=CustomJSONEncoder)


class LogLevel(str, Enum):
    DEBUG = 'debug'
    INFO = 'info'
    WARN = 'warn'
    ERROR = 'error'

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]

    @classmethod
    def parse(cls, value: 'str | LogLevel') -> 'LogLevel':
        if isinstance(value, LogLevel):
            return value
        normalized = value.strip().lower()
        if normalized == 'warning':
            normalized = 'warn'
        elif normalized == 'critical':
            normalized = 'error'
        return cls(normalized)

    @classmethod
    def from_logging_level(cls, levelno: int) -> 'LogLevel':
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

_SEVERITY = {level: rank for rank, level in enumerate(LogLevel)}


@dataclass(frozen=True)
class LogEntry:
    timestamp: int  # ms epoch
    level: LogLevel
    component: str
    message: str
    data: Any = None


class InMemoryLogHandler(logging.Handler):
    """
    Keeps the most recent log records in a bounded buffer so they can be
    served back over the API.
    """
    def __init__(self, capacity: int = 500, level: int = logging.NOTSET):
        super().__init__(level)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=int(record.created * 1000),
                level=LogLevel.from_logging_level(record.levelno),
                component=record.name,
                message=record.getMessage(),
                data=getattr(record, 'extra_data', None),
            )
            self._entries.append(entry)
        except Exception:
            self.handleError(record)

    def get_logs(self, min_level: LogLevel | str | None = None) -> list[LogEntry]:
        entries = list(self._entries)
        if min_level is None:
            return entries
        threshold = _SEVERITY[LogLevel.parse(min_level)]
        return [entry for entry in entries if _SEVERITY[entry.level] >= threshold]

    def clear(self) -> None:
        self._entries.clear()


CONSOLE_HANDLER_NAME = 'aggregator-console'

_memory_handler: InMemoryLogHandler | None = None


def configure_logging(
        level: LogLevel | str = LogLevel.INFO,
        json_output: bool = False,
        buffer_size: int = 500
) -> InMemoryLogHandler:
    """Install console and in-memory handlers on the root logger."""
    global _memory_handler
    log_level = LogLevel.parse(level).logging_level

    root_logger = logging.getLogger()
    if _memory_handler is not None:
        root_logger.removeHandler(_memory_handler)
    for handler in list(root_logger.handlers):
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(log_level)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_format = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'
        console_handler.setFormatter(logging.Formatter(console_format, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    _memory_handler = InMemoryLogHandler(capacity=buffer_size, level=log_level)
    root_logger.addHandler(_memory_handler)
    return _memory_handler


def get_memory_handler() -> InMemoryLogHandler | None:
    return _memory_handler
