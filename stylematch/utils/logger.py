"""
Logging configuration for the application.
"""
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from loguru import logger

from stylematch.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function} - {message}"
ERROR_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | "
    "{name}:{function}:{line} - {message}\n{exception}"
)
ACCESS_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {extra[request_id]} | {message}"

# Записи вне HTTP запроса (старт, скрипты) помечаются этим request_id
NO_REQUEST_ID = "-"


def _is_access(record: dict) -> bool:
    return record["extra"].get("access", False)


def _file_sinks() -> List[Dict]:
    """
    Файловые sink'и: (имя файла, уровень, срок хранения, формат, фильтр).

    access_* получает только записи middleware (bind(access=True)),
    app_* получает всё остальное.
    """
    return [
        {
            "name": "app",
            "level": "INFO",
            "retention": "30 days",
            "format": FILE_FORMAT,
            "filter": lambda record: not _is_access(record),
        },
        {
            "name": "errors",
            "level": "ERROR",
            "retention": "90 days",
            "format": ERROR_FORMAT,
            "filter": None,
            "backtrace": True,
        },
        {
            "name": "access",
            "level": "INFO",
            "retention": "14 days",
            "format": ACCESS_FORMAT,
            "filter": _is_access,
        },
    ]


def setup_logging(log_dir: Optional[str] = None, enqueue: bool = True) -> Path:
    """
    Настроить логирование для приложения.

    Консоль: цветной текст в debug режиме, JSON в остальных случаях.
    Файлы: app/errors/access с ежедневной ротацией и сжатием.
    Каждая запись несёт request_id из LoggingMiddleware.

    Args:
        log_dir: Каталог логов (по умолчанию settings.log_dir)
        enqueue: Писать файлы через очередь (безопасно для нескольких воркеров)

    Returns:
        Каталог, куда пишутся логи
    """
    logger.remove()
    logger.configure(extra={"request_id": NO_REQUEST_ID})

    if settings.debug:
        logger.add(sys.stdout, colorize=True, format=CONSOLE_FORMAT, level="DEBUG")
    else:
        logger.add(sys.stdout, serialize=True, level=settings.log_level)

    path = Path(log_dir or settings.log_dir)
    path.mkdir(parents=True, exist_ok=True)

    for sink in _file_sinks():
        filter_func: Optional[Callable] = sink["filter"]
        logger.add(
            path / f"{sink['name']}_{{time:YYYY-MM-DD}}.log",
            rotation="00:00",
            retention=sink["retention"],
            compression="zip",
            level=sink["level"],
            format=sink["format"],
            filter=filter_func,
            enqueue=enqueue,
            backtrace=sink.get("backtrace", False),
            diagnose=False,  # не выводить значения переменных (там эмбеддинги)
        )

    logger.info("✅ Logging configured successfully")
    logger.debug(f"Log directory: {path.absolute()}")
    return path
