# -*- coding: utf-8 -*-
# Copyright (c) 2025, PT. Innovasi Terbaik Bangsa and contributors
# For license information, please see license.txt

"""
Logging helpers for the payroll engine.

Every module gets its logger through get_logger() so that all records end up
under the ``payroll_engine`` namespace with one handler and one format.

Usage:
    from payroll_engine.log_utils import get_logger

    logger = get_logger(__name__)
    logger.info("Payroll run started")
"""

import logging
from typing import Union

__all__ = ["ROOT_LOGGER_NAME", "get_logger", "configure_logging"]

ROOT_LOGGER_NAME = "payroll_engine"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _root_logger(fallback_level: int = logging.INFO) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        root.setLevel(fallback_level)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def get_logger(name: str, fallback_level: int = logging.INFO) -> logging.Logger:
    """
    Get a logger under the payroll_engine namespace.

    Args:
        name: The name of the logger, typically the module name
        fallback_level: Level used when the package logger is configured for the first time
    Returns:
        logging.Logger: A configured logger instance
    """
    _root_logger(fallback_level)

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger_name = name
    else:
        logger_name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(logger_name)


def configure_logging(level: Union[str, int]) -> None:
    """Set the level of the package logger, e.g. from EngineSettings.log_level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    _root_logger().setLevel(level)
