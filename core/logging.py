import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure structured logging for the whole app.
    Call this once in FastAPI startup (or at the top of a script).
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

