import logging
import os


def configure_logging(default_level: int = logging.INFO) -> None:
    """Set up root logging for the ``pitgen`` command.

    Pass progress is logged by each module under ``pitgen.*``. The level can
    be forced with PITGEN_LOG_LEVEL (e.g. ``DEBUG``); unknown names keep
    ``default_level``.
    """
    level_name = os.getenv("PITGEN_LOG_LEVEL")
    level = default_level
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s | %(message)s",
    )
