import logging
import sys
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Directorio de logs (backend/logs/)
_LOG_DIR = Path(__file__).parent.parent.parent / "logs"

# Símbolos para visualizar el flujo
FLOW_SYMBOLS = {
    "start": "╔",
    "node": "║",
    "arrow": "→",
    "end": "╚",
    "route": "◆",
}


def _configure_root_logger(level: LogLevel) -> None:
    """Configura el logger raíz con handlers de consola y archivo."""
    root = logging.getLogger()
    if root.handlers:
        return

    # Silenciar loggers ruidosos de terceros
    noisy_loggers = [
        "watchfiles",
        "watchfiles.main",
        "httpx",
        "httpcore",
        "httpcore.http11",
        "httpcore.connection",
        "hpack",
        "urllib3",
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)

    # Handler de consola (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    # Handler de archivo con rotación diaria (mantiene 7 días)
    try:
        _LOG_DIR.mkdir(exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            _LOG_DIR / "avrisk.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        # Si falla la creación del archivo, solo usar consola
        root.warning(f"File logging disabled: {e}")

    root.setLevel(level)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """
    Retorna un logger configurado para el módulo especificado.

    Uso:
        from avrisk.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Mensaje")
    """
    from avrisk.core.config import settings

    _configure_root_logger(settings.log_level)
    return logging.getLogger(name)


class SyncLogger:
    """Logger especializado para trazabilidad de las cargas desde Current RMS."""

    def __init__(self, source: str = "current_rms"):
        self._logger = get_logger(f"sync.{source}")
        self.source = source

    def fetch_start(self, scope: str, page_size: int) -> None:
        """Log inicio de la descarga paginada."""
        self._logger.info("=" * 70)
        self._logger.info(f"{FLOW_SYMBOLS['start']}══ FETCH START ═════════════════════════════════════════════════════")
        self._logger.info(f"{FLOW_SYMBOLS['node']} Source: {self.source} | Scope: {scope} | Page size: {page_size}")

    def page_received(self, page: int, rows: int, accumulated: int, total: int | None) -> None:
        expected = total if total is not None else "?"
        self._logger.debug(
            f"{FLOW_SYMBOLS['node']} [PAGE {page}] {FLOW_SYMBOLS['arrow']} {rows} rows | {accumulated}/{expected}"
        )

    def fetch_end(self, loaded: int, skipped: int, pages: int, truncated: bool) -> None:
        """Log fin de la descarga con resumen."""
        self._logger.info(f"{FLOW_SYMBOLS['end']}══ FETCH COMPLETE ══════════════════════════════════════════════════")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Opportunities: {loaded} loaded, {skipped} skipped")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Pages: {pages}{' (truncated at ceiling)' if truncated else ''}")
        self._logger.info("=" * 70)

    def fallback(self, reason: Exception) -> None:
        self._logger.warning(
            f"{FLOW_SYMBOLS['route']} FALLBACK: demo dataset in use | {type(reason).__name__}: {reason}"
        )

    def record_skipped(self, record_id: object, reason: str) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} Skipped record {record_id!r}: {reason}")

    def error(self, stage: str, error: Exception) -> None:
        self._logger.error(f"{FLOW_SYMBOLS['node']} [{stage.upper()}] ERROR: {type(error).__name__}: {error}")
