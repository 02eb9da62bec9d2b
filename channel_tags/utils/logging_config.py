"""
Logging configuration for channel tags.
Provides consistent logging across all modules.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get a configured logger instance.
    
    Args:
        name: Logger name (usually module name)
        level: Logging level (default INFO)
    
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(f"channel_tags.{name}")
    
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        
        logger.addHandler(console_handler)
        logger.setLevel(level)
        # Records still reach the root "channel_tags" logger for file output
        logger.propagate = True
    
    return logger


def setup_file_logging(log_dir: Optional[Path] = None, level: int = logging.DEBUG) -> Path:
    """
    Add file handler to root channel_tags logger.
    
    Args:
        log_dir: Directory for log files. If None, uses ./logs
        level: File logging level (default DEBUG)
    
    Returns:
        Path of the log file
    """
    if log_dir is None:
        log_dir = Path.cwd() / "logs"
    
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "channel_tags.log"
    
    root_logger = logging.getLogger("channel_tags")
    
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    
    root_logger.addHandler(file_handler)
    return log_file
