"""
logging_utils.py

A small collection of logging helpers used across notesync.

Two kinds of output exist in this project:

    • CLI progress messages, printed with Typer's echo when --verbose is on
    • library diagnostics (swallowed sync failures, cache activity), sent
      through the standard `logging` module under the "notesync" namespace

The library never configures handlers on import; the CLI calls
`configure_logging()` once at startup.
"""

import logging

import typer

ROOT_LOGGER_NAME = "notesync"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def log_verbose(message: str, verbose: bool) -> None:
    """
    Print a high‑level progress message when verbose mode is enabled.

    Parameters
    ----------
    message : str
        Short, plain‑English description of what is happening
        (e.g., "Resolving folder chain...").
    verbose : bool
        When False this function does nothing.
    """
    if verbose:
        typer.echo(message)


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the `notesync` namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(debug: bool = False) -> logging.Logger:
    """
    Attach a single stream handler to the `notesync` logger.

    Safe to call repeatedly: the handler is only added once, later calls
    just adjust the level.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    if not any(getattr(h, "_notesync_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._notesync_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
