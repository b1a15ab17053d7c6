from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, cast

import colorlog
from concurrent_log_handler import ConcurrentRotatingFileHandler

from smartfee import __version__
from smartfee.util.config import path_from_root

default_log_level = "WARNING"


def get_file_log_handler(
    formatter: logging.Formatter, root_path: Path, logging_config: Dict[str, object]
) -> ConcurrentRotatingFileHandler:
    log_path = path_from_root(root_path, str(logging_config.get("log_filename", "log/debug.log")))
    log_path.parent.mkdir(parents=True, exist_ok=True)
    maxrotation = cast(int, logging_config.get("log_maxfilesrotation", 7))
    maxbytesrotation = cast(int, logging_config.get("log_maxbytesrotation", 50 * 1024 * 1024))
    use_gzip = cast(bool, logging_config.get("log_use_gzip", False))
    handler = ConcurrentRotatingFileHandler(
        os.fspath(log_path), "a", maxBytes=maxbytesrotation, backupCount=maxrotation, use_gzip=use_gzip
    )
    handler.setFormatter(formatter)
    return handler


def initialize_logging(service_name: str, logging_config: Dict[str, Any], root_path: Path) -> None:
    log_level = logging_config.get("log_level", default_log_level)
    file_name_length = 33 - len(service_name)
    log_date_format = "%Y-%m-%dT%H:%M:%S"
    handlers: List[logging.Handler] = []
    if logging_config.get("log_stdout", False):
        stdout_handler = colorlog.StreamHandler()
        stdout_handler.setFormatter(
            colorlog.ColoredFormatter(
                f"%(asctime)s.%(msecs)03d {__version__} {service_name} %(name)-{file_name_length}s: "
                f"%(log_color)s%(levelname)-8s%(reset)s %(message)s",
                datefmt=log_date_format,
                reset=True,
            )
        )
        handlers.append(stdout_handler)
    else:
        file_log_formatter = logging.Formatter(
            fmt=f"%(asctime)s.%(msecs)03d {__version__} {service_name} %(name)-{file_name_length}s: "
            f"%(levelname)-8s %(message)s",
            datefmt=log_date_format,
        )
        handlers.append(get_file_log_handler(file_log_formatter, root_path, logging_config))

    root_logger = logging.getLogger()
    for handler in handlers:
        root_logger.addHandler(handler)

    set_log_level(log_level=log_level, service_name=service_name)


def set_log_level(log_level: str, service_name: str) -> List[str]:
    root_logger = logging.getLogger()
    log_level_exceptions = {}

    for handler in root_logger.handlers:
        try:
            handler.setLevel(log_level)
        except Exception as e:
            handler.setLevel(default_log_level)
            log_level_exceptions[handler] = e

    error_strings = [
        f"Handler {handler}: Invalid log level '{log_level}' for {service_name}. "
        f"Defaulting to: {default_log_level}. Error: {exception}"
        for handler, exception in log_level_exceptions.items()
    ]
    for error_string in error_strings:
        root_logger.error(error_string)

    # The root logger defaults to WARNING, which would filter records before the handlers see them
    root_logger.setLevel(min(handler.level for handler in root_logger.handlers))

    return error_strings


def initialize_service_logging(service_name: str, config: Dict[str, Any], root_path: Path) -> None:
    """config is the full config.yaml, the service section must carry a `logging` entry"""
    initialize_logging(
        service_name=service_name,
        logging_config=config[service_name]["logging"],
        root_path=root_path,
    )
