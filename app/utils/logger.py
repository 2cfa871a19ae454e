"""
Logger compartilhado da aplicação.

Grava em `logs/app.log` (quando LOG_TO_FILE) no formato `... [LEVEL] ...`
e conta as mensagens por nível nas métricas Prometheus.
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config.settings import LOG_LEVEL, LOG_TO_FILE
from app.utils.prometheus_metrics import record_log

BASE_DIR = Path(__file__).resolve().parent.parent
LOG_DIR = BASE_DIR / "logs"
LOG_FILE = LOG_DIR / "app.log"

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _MetricsHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        record_log(record.levelname)


def _configurar_logger() -> logging.Logger:
    log = logging.getLogger("app")
    if log.handlers:
        return log

    log.setLevel(LOG_LEVEL)
    formatter = logging.Formatter(_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    log.addHandler(stream)

    if LOG_TO_FILE:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            arquivo = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
            arquivo.setFormatter(formatter)
            log.addHandler(arquivo)
        except OSError as e:
            log.warning(f"[Logger] Não foi possível abrir {LOG_FILE}: {e}")

    log.addHandler(_MetricsHandler())
    log.propagate = False
    return log


logger = _configurar_logger()
