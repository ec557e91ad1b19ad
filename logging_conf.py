import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configures the root logger for the planner app."""
    numeric_level = getattr(logging, level.upper(), None)
    invalid = not isinstance(numeric_level, int)
    if invalid:
        numeric_level = logging.INFO

    # Format: "2025-08-14 10:00:00 [DEBUG] brew_calc: Clamped lead bottles 20 -> 13"
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Streamlit reruns the script on every input change
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(handler)

    # Quiet down noisy libraries
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    if invalid:
        logging.getLogger(__name__).warning("Invalid log level: %s, defaulting to INFO", level)
