"""
Servicio de backup nocturno de MongoDB a S3
"""
__version__ = "1.0.0"

from .config import Config
from .logger import LoggerService

__all__ = ['Config', 'LoggerService']
