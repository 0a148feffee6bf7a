"""
Estrategia de dump para MongoDB usando mongodump
"""
import subprocess
from pathlib import Path
from typing import Callable, Optional
from .base_strategy import DumpStrategy
from ..config import Config
from ..models import DumpResult


class MongoDumpStrategy(DumpStrategy):
    """Estrategia de dump basada en la herramienta mongodump"""

    def __init__(self, timeout_seconds: int = Config.DEFAULT_DUMP_TIMEOUT,
                 runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
                 check_tools: bool = True):
        """
        Inicializa la estrategia

        Args:
            timeout_seconds: Tiempo máximo por base de datos
            runner: Función equivalente a subprocess.run (inyectable en tests)
            check_tools: Verificar que mongodump esté en el PATH
        """
        super().__init__()
        self.timeout_seconds = timeout_seconds
        self.runner = runner or subprocess.run
        self.check_tools = check_tools

    def build_command(self, uri: str, output_dir: Path) -> list:
        """Construye la línea de comando de mongodump"""
        return [
            Config.DUMP_TOOL,
            '--uri', uri,
            '--out', str(output_dir),
        ]

    def dump(self, database_name: str, uri: str, output_dir: Path) -> DumpResult:
        """
        Ejecuta mongodump para una base de datos

        Args:
            database_name: Nombre de la base de datos
            uri: URI de conexión limitado a esa base de datos
            output_dir: Directorio de salida propio de la base de datos

        Returns:
            Resultado del dump
        """
        if self.check_tools:
            tool_error = self._validate_tools([Config.DUMP_TOOL])
            if tool_error:
                return DumpResult(
                    database_name=database_name,
                    success=False,
                    error=tool_error
                )

        try:
            result = self.runner(
                self.build_command(uri, output_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout_seconds
            )
        except subprocess.TimeoutExpired:
            return DumpResult(
                database_name=database_name,
                success=False,
                error=f"Timeout: el dump tardó más de {self.timeout_seconds}s"
            )
        except OSError as e:
            return DumpResult(
                database_name=database_name,
                success=False,
                error=str(e)
            )

        # mongodump escribe su progreso en stderr
        for line in (result.stderr or "").splitlines():
            self.logger.debug(f"[{database_name}] {line}")

        if result.returncode == 0:
            return DumpResult(
                database_name=database_name,
                success=True,
                output_dir=str(output_dir)
            )

        stderr = (result.stderr or "").strip()
        return DumpResult(
            database_name=database_name,
            success=False,
            output_dir=str(output_dir),
            error=f"exit status {result.returncode}: {stderr[-500:]}" if stderr
            else f"exit status {result.returncode}"
        )
