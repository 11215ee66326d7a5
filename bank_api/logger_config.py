import logging
import os
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
import sys

LOG_FILE_NAME = "bank_api.log"

# Set per request by RequestIDMiddleware; "-" outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_factory_installed = False

def _log_dir() -> str:
    return os.environ.get("BANK_LOG_DIR", os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs"))

def install_request_id_factory():
    """Stamp every LogRecord with the current request id. Installed once per process."""
    global _factory_installed
    if _factory_installed:
        return
    old_factory = logging.getLogRecordFactory()
    def record_factory(*args, **kwargs):
        rec = old_factory(*args, **kwargs)
        rec.request_id = request_id_var.get()
        return rec
    logging.setLogRecordFactory(record_factory)
    _factory_installed = True

def setup_logging():
    """Configure application-wide logging with console + rotating file."""
    install_request_id_factory()
    root = logging.getLogger()
    if root.handlers:
        # Avoid double configuration if reloaded
        return

    root.setLevel(os.environ.get("BANK_LOG_LEVEL", "INFO").upper())

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] [%(name)s] [%(request_id)s] %(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    root.addHandler(console)

    log_dir = _log_dir()
    os.makedirs(log_dir, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME), when="midnight", backupCount=7, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)
