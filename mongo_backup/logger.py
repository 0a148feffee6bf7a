"""
Servicio de logging compartido por todos los componentes
"""
import logging
import sys
from datetime import datetime
from .config import Config


class LoggerService:
    """Servicio centralizado de logging"""

    _loggers = {}
    NAMESPACE = "mongo_backup"

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Obtiene o crea un logger con el nombre especificado

        Args:
            name: Nombre del componente

        Returns:
            Logger configurado
        """
        if name in cls._loggers:
            return cls._loggers[name]

        logger = cls._setup_logger(name)
        cls._loggers[name] = logger
        return logger

    @classmethod
    def _setup_logger(cls, name: str) -> logging.Logger:
        """
        Configura un nuevo logger con salida a consola y a archivo diario

        Args:
            name: Nombre del componente

        Returns:
            Logger configurado
        """
        Config.ensure_directories()

        logger = logging.getLogger(f"{cls.NAMESPACE}.{name}")
        logger.setLevel(Config.LOG_LEVEL)
        logger.propagate = False

        # Evitar duplicar handlers
        if logger.handlers:
            return logger

        formatter = logging.Formatter(Config.LOG_FORMAT)

        log_file = Config.LOG_DIR / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(Config.LOG_LEVEL)
        file_handler.setFormatter(formatter)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(Config.LOG_LEVEL)
        console_handler.setFormatter(formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger
