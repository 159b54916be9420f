# map_planner/core/logging_config.py

import logging

from map_planner.core.config import settings

# Shared application logger
logger = logging.getLogger("map_planner")

level = logging.getLevelName(settings.LOG_LEVEL.upper())
if not isinstance(level, int):
    level = logging.INFO

logger.setLevel(level)

if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
