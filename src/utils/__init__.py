"""유틸리티 모듈"""
from .config import AppSettings, load_settings
from .logging_config import setup_logging

__all__ = ["AppSettings", "load_settings", "setup_logging"]
