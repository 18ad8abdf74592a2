import logging
import os
from datetime import datetime


def setup_logger(log_dir: str = ".llm_patcher/logs",
                 verbose: bool = False) -> logging.Logger:
    """Creates a file logger. All verbose output goes here.

    With *verbose* warnings and above are echoed to stderr as well.
    """
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"patcher_{timestamp}.log")

    logger = logging.getLogger("llm_patcher")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    if verbose:
        sh = logging.StreamHandler()
        sh.setLevel(logging.WARNING)
        sh.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(sh)

    return logger


def print_error(message: str) -> None:
    print(f"❌ Error: {message}")


def print_status(icon: str, message: str) -> None:
    print(f"{icon} {message}")
