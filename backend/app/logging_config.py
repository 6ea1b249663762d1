import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path("logs")

FORMAT = (
    "%(asctime)s | %(levelname)-7s | %(name)s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
formatter = logging.Formatter(FORMAT)


def _file_handler(path: Path, level=logging.INFO) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    for h in logger.handlers:
        if getattr(h, "baseFilename", None) == getattr(handler, "baseFilename", None):
            return
    logger.addHandler(handler)


def setup_logging(log_dir: Path = LOG_DIR) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # --- Core ---
    core_handler = _file_handler(log_dir / "core.log")

    core_parent = logging.getLogger("backend.app")
    _attach(core_parent, core_handler)
    core_parent.propagate = False

    starter_parent = logging.getLogger("starter")
    _attach(starter_parent, core_handler)
    starter_parent.propagate = False

    # --- Wizard (install queue, wp-cli dispatch, option store) ---
    wizard_handler = _file_handler(log_dir / "wizard.log", level=logging.DEBUG)

    wizard_parent = logging.getLogger("backend.app.wizard")
    _attach(wizard_parent, wizard_handler)
    wizard_parent.propagate = False

    starter_wizard = logging.getLogger("starter.wizard")
    _attach(starter_wizard, wizard_handler)
    starter_wizard.propagate = False

    # --- Uvicorn ---
    uvicorn_handler = _file_handler(log_dir / "uvicorn.log")
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        ul = logging.getLogger(name)
        _attach(ul, uvicorn_handler)
        ul.propagate = False
