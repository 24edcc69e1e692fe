import logging

from laptop_api.core.config import settings

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_JSON_FORMAT = '{"t":"%(asctime)s","lv":"%(levelname)s","lg":"%(name)s","msg":"%(message)s"}'


def setup_logging() -> logging.Logger:
    """
    Настройка корневого логгера по LOG_LEVEL и LOG_FORMAT ('plain' или 'json').
    Повторный вызов (hot-reload) не добавляет второй обработчик.
    """
    level = _LEVELS.get(settings.log_level.upper(), logging.INFO)
    fmt = _JSON_FORMAT if settings.log_format.lower() == "json" else _PLAIN_FORMAT

    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_laptop_api", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler._laptop_api = True
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    return logging.getLogger("laptop_api")
