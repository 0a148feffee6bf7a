"""
Estrategia base para herramientas de dump (Strategy Pattern)
"""
from abc import ABC, abstractmethod
import shutil
import time
from pathlib import Path
from typing import List, Optional
from ..logger import LoggerService
from ..models import DumpResult


class DumpStrategy(ABC):
    """Interfaz abstracta para las herramientas externas de dump"""

    def __init__(self):
        """Inicializa la estrategia"""
        self.logger = LoggerService.get_logger(self.__class__.__name__)

    @abstractmethod
    def dump(self, database_name: str, uri: str, output_dir: Path) -> DumpResult:
        """
        Ejecuta el dump de una base de datos

        Args:
            database_name: Nombre de la base de datos
            uri: URI de conexión limitado a esa base de datos
            output_dir: Directorio de salida propio de la base de datos

        Returns:
            Resultado del dump
        """
        pass

    def execute_dump(self, database_name: str, uri: str, output_dir: Path) -> DumpResult:
        """
        Template method para ejecutar el dump con medición de tiempo

        Args:
            database_name: Nombre de la base de datos
            uri: URI de conexión limitado a esa base de datos
            output_dir: Directorio de salida propio de la base de datos

        Returns:
            Resultado del dump
        """
        self.logger.info(f"Backing up database: {database_name}")
        start_time = time.time()

        try:
            result = self.dump(database_name, uri, output_dir)
        except Exception as e:
            result = DumpResult(
                database_name=database_name,
                success=False,
                error=str(e)
            )
        result.duration_seconds = time.time() - start_time

        if result.success:
            self.logger.info(
                f"Successfully backed up {database_name} ({result.duration_seconds:.2f}s)"
            )
        else:
            self.logger.error(f"Failed to dump {database_name}: {result.error}")

        return result

    def _validate_tools(self, tools: List[str]) -> Optional[str]:
        """
        Valida que las herramientas necesarias estén disponibles

        Args:
            tools: Lista de herramientas requeridas

        Returns:
            None si todo está OK, mensaje de error en caso contrario
        """
        for tool in tools:
            if not shutil.which(tool):
                return f"La herramienta {tool} no está instalada"
        return None
