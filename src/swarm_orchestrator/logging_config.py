"""Centralized logging configuration for swarm-orchestrator."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import Config, get_config

LOGGER_NAME = "swarm_orchestrator"


def setup_logging(
	level: Optional[str] = None,
	log_dir: Optional[Path] = None,
	config: Optional[Config] = None,
) -> logging.Logger:
	"""
	Set up logging for the package with console and file handlers.

	Host processes call this once; library modules only ever use
	``logging.getLogger(__name__)``.

	Args:
		level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to
			``config.log_level``.
		log_dir: Directory for the rotating log file. Defaults to
			``config.log_dir``.
		config: Settings to take defaults from; the global config if None

	Returns:
		Configured package logger
	"""
	if level is None or log_dir is None:
		config = config or get_config()
		level = level or config.log_level
		log_dir = log_dir or config.log_dir
	log_level = getattr(logging, level.upper(), logging.INFO)

	logger = logging.getLogger(LOGGER_NAME)
	logger.setLevel(log_level)

	# Avoid duplicate handlers
	if logger.handlers:
		return logger

	detailed_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	simple_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(message)s",
		datefmt="%H:%M:%S",
	)

	console_handler = logging.StreamHandler(sys.stdout)
	console_handler.setLevel(log_level)
	console_handler.setFormatter(simple_formatter)
	logger.addHandler(console_handler)

	log_path = Path(log_dir)
	log_path.mkdir(parents=True, exist_ok=True)

	file_handler = RotatingFileHandler(
		log_path / f"{LOGGER_NAME}.log",
		maxBytes=10 * 1024 * 1024,  # 10 MB
		backupCount=5,
	)
	file_handler.setLevel(logging.DEBUG)  # File gets all logs
	file_handler.setFormatter(detailed_formatter)
	logger.addHandler(file_handler)

	return logger
