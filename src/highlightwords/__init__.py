"""highlightwords - Highlight the words of a rich-text document.

Select text in a rendered document and color it; selections are kept as a
non-overlapping partition of the document and rendered back as spans that
never straddle block structure.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

__version__ = "0.1.0"


def _setup_logging() -> None:
    """Configure logging to both console and rotating file."""
    from highlightwords.config import get_settings

    log_dir = get_settings().app.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"highlightwords.{os.getpid()}.log"

    # Root logger config
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Already configured for this process (e.g. main() called twice)
    if any(
        isinstance(handler, RotatingFileHandler)
        and handler.baseFilename == str(log_file.absolute())
        for handler in root_logger.handlers
    ):
        return

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the highlightwords web application."""
    import uvicorn

    from highlightwords.config import get_settings
    from highlightwords.server import create_app

    _setup_logging()

    settings = get_settings()
    host, port = settings.app.host, settings.app.port

    print(f"highlightwords v{__version__}")
    print(f"Starting application on http://{host}:{port}")

    uvicorn.run(create_app(), host=host, port=port, log_config=None)


if __name__ in {"__main__", "__mp_main__"}:
    main()
