"""
Servicio para limpiar el directorio de salida de los dumps
"""
import shutil
from pathlib import Path
from ..exceptions import CleanupError
from ..logger import LoggerService


class CleanupService:
    """Servicio para eliminar los artefactos locales de una ejecución"""

    def __init__(self):
        """Inicializa el servicio de limpieza"""
        self.logger = LoggerService.get_logger("CleanupService")

    def clean_directory(self, directory: Path) -> int:
        """
        Elimina todas las entradas directas del directorio, de forma recursiva

        El directorio en sí se conserva.

        Args:
            directory: Directorio de salida de los dumps

        Returns:
            Cantidad de entradas eliminadas

        Raises:
            CleanupError: Si no se puede listar el directorio o eliminar una entrada
        """
        directory = Path(directory)
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise CleanupError(f"No se pudo listar {directory}: {e}") from e

        deleted_count = 0
        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                raise CleanupError(f"No se pudo eliminar {entry}: {e}") from e
            deleted_count += 1
            self.logger.debug(f"Eliminado: {entry}")

        if deleted_count > 0:
            self.logger.info(f"Limpieza completada: {deleted_count} entrada(s) eliminada(s) de {directory}")
        else:
            self.logger.info(f"No hay nada que limpiar en {directory}")

        return deleted_count

    def get_directory_stats(self, directory: Path) -> dict:
        """
        Obtiene estadísticas del directorio de salida

        Args:
            directory: Directorio de salida de los dumps

        Returns:
            Diccionario con estadísticas
        """
        stats = {
            'entries': 0,
            'total_files': 0,
            'total_size_mb': 0,
        }
        directory = Path(directory)
        if not directory.is_dir():
            return stats

        try:
            stats['entries'] = sum(1 for _ in directory.iterdir())
            files = [p for p in directory.rglob('*') if p.is_file()]
            stats['total_files'] = len(files)
            stats['total_size_mb'] = sum(f.stat().st_size for f in files) / (1024 * 1024)
        except OSError as e:
            self.logger.error(f"Error obteniendo estadísticas: {e}")
        return stats
