"""
Servicio que enumera las bases de datos y ejecuta el dump de cada una
"""
from pathlib import Path
from typing import List, Optional
from ..config import Config
from ..logger import LoggerService
from ..models import DumpResult, MongoSettings
from ..strategies.base_strategy import DumpStrategy
from ..strategies.mongodump_strategy import MongoDumpStrategy
from .cleanup_service import CleanupService
from .database_enumerator import DatabaseEnumerator


class BackupService:
    """Servicio que orquesta los dumps por base de datos"""

    def __init__(self, mongo_settings: MongoSettings, output_dir: Path,
                 enumerator: Optional[DatabaseEnumerator] = None,
                 strategy: Optional[DumpStrategy] = None,
                 cleanup_service: Optional[CleanupService] = None):
        """
        Inicializa el servicio de backup

        Args:
            mongo_settings: Configuración de conexión al cluster
            output_dir: Directorio raíz de los dumps
            enumerator: Enumerador de bases de datos (opcional)
            strategy: Herramienta de dump (opcional)
            cleanup_service: Servicio que vacía el directorio y calcula estadísticas (opcional)
        """
        self.mongo_settings = mongo_settings
        self.output_dir = Path(output_dir)
        self.enumerator = enumerator or DatabaseEnumerator(mongo_settings)
        self.strategy = strategy or MongoDumpStrategy(mongo_settings.dump_timeout_seconds)
        self.cleanup_service = cleanup_service or CleanupService()
        self.logger = LoggerService.get_logger("BackupService")

    def backup_all_databases(self) -> List[DumpResult]:
        """
        Realiza el dump de todas las bases de datos del cluster

        Un fallo en una base de datos no detiene las siguientes. Antes de
        los dumps se vacía el directorio de salida, así el archivo solo
        contiene las bases enumeradas en esta ejecución.

        Returns:
            Lista de resultados, uno por base de datos

        Raises:
            ClusterConnectionError: Si no se pudo enumerar el cluster
            CleanupError: Si no se pudieron eliminar restos de una ejecución anterior
        """
        self.logger.info("=" * 70)
        self.logger.info("INICIANDO PROCESO DE BACKUP")
        self.logger.info("=" * 70)

        databases = self.enumerator.list_databases()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        leftovers = self.cleanup_service.clean_directory(self.output_dir)
        if leftovers:
            self.logger.warning(f"Eliminados {leftovers} resto(s) de una ejecución anterior en {self.output_dir}")

        results = []
        for database_name in databases:
            self.logger.info("-" * 70)
            results.append(self._backup_single_database(database_name))

        self.logger.info("All backups completed.")
        self._print_summary(results)
        return results

    def backup_specific_database(self, database_name: str) -> DumpResult:
        """
        Realiza el dump de una base de datos específica

        Args:
            database_name: Nombre de la base de datos

        Returns:
            Resultado del dump
        """
        if database_name in self.enumerator.excluded:
            error_msg = f"Base de datos interna, no se respalda: {database_name}"
            self.logger.warning(error_msg)
            return DumpResult(
                database_name=database_name,
                success=False,
                error=error_msg
            )

        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self._backup_single_database(database_name)

    def _backup_single_database(self, database_name: str) -> DumpResult:
        """
        Ejecuta el dump de una base de datos en su propio subdirectorio

        Args:
            database_name: Nombre de la base de datos

        Returns:
            Resultado del dump
        """
        self.logger.debug(f"URI: {self.mongo_settings.masked_uri(database_name)}")
        return self.strategy.execute_dump(
            database_name,
            self.mongo_settings.cluster_uri(database_name),
            self.output_dir / database_name
        )

    def _print_summary(self, results: List[DumpResult]):
        """
        Imprime resumen de la operación de backup

        Args:
            results: Lista de resultados
        """
        success_count = sum(1 for r in results if r.success)
        failed_count = len(results) - success_count
        total_time = sum(r.duration_seconds for r in results)

        self.logger.info("=" * 70)
        self.logger.info("RESUMEN DEL PROCESO DE BACKUP")
        self.logger.info("=" * 70)

        for result in results:
            status = "✓ EXITOSO" if result.success else "✗ FALLIDO"
            self.logger.info(f"{status}: {result.database_name} ({result.duration_seconds:.2f}s)")
            if not result.success:
                self.logger.error(f"  Error: {result.error}")

        self.logger.info("-" * 70)
        self.logger.info(f"Total de bases de datos procesadas: {len(results)}")
        self.logger.info(f"Backups exitosos: {success_count}")
        self.logger.info(f"Backups fallidos: {failed_count}")
        self.logger.info(f"Tiempo total: {total_time:.2f}s")

        stats = self.cleanup_service.get_directory_stats(self.output_dir)
        self.logger.info(f"Espacio utilizado: {stats['total_size_mb']:.2f} MB ({stats['total_files']} archivo(s))")
        self.logger.info("=" * 70)

        if failed_count > 0:
            self.logger.warning(
                f"ATENCIÓN: {failed_count} backup(s) fallaron. "
                "El archivo se subirá con los dumps disponibles."
            )
