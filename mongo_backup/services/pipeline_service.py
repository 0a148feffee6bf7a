"""
Pipeline completo: backup, compresión, subida y limpieza
"""
import threading
from datetime import datetime
from ..exceptions import ArchiveError, ClusterConnectionError, CleanupError, UploadError
from ..logger import LoggerService
from ..models import RunReport
from .archive_service import ArchiveService
from .backup_service import BackupService
from .cleanup_service import CleanupService
from .upload_service import UploadService


class PipelineService:
    """Ejecuta una corrida completa del backup"""

    def __init__(self, backup_service: BackupService, archive_service: ArchiveService,
                 upload_service: UploadService, cleanup_service: CleanupService):
        """
        Inicializa el pipeline

        Args:
            backup_service: Enumeración y dump de bases de datos
            archive_service: Compresión del directorio de salida
            upload_service: Subida del archivo a S3
            cleanup_service: Limpieza del directorio de salida
        """
        self.backup_service = backup_service
        self.archive_service = archive_service
        self.upload_service = upload_service
        self.cleanup_service = cleanup_service
        self.logger = LoggerService.get_logger("PipelineService")
        self._run_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def run(self) -> RunReport:
        """
        Ejecuta el pipeline si no hay otra ejecución en curso

        Returns:
            Reporte de la ejecución
        """
        if not self._run_lock.acquire(blocking=False):
            self.logger.warning("Ya hay un backup en curso; se omite esta ejecución")
            return RunReport(started_at=datetime.now(), finished_at=datetime.now(), skipped=True)

        try:
            return self._run()
        finally:
            self._run_lock.release()

    def _run(self) -> RunReport:
        report = RunReport(started_at=datetime.now())
        output_dir = self.backup_service.output_dir

        try:
            report.dump_results = self.backup_service.backup_all_databases()
        except (ClusterConnectionError, CleanupError) as e:
            return self._abort(report, e, "Se abandona la ejecución")

        try:
            report.archive_path = self.archive_service.archive_directory(output_dir, report.started_at)
        except ArchiveError as e:
            return self._abort(report, e, "No se subirá ningún archivo")

        try:
            report.upload = self.upload_service.upload_archive(report.archive_path)
        except UploadError as e:
            return self._abort(report, e, "Los archivos locales se conservan para inspección")

        try:
            report.cleaned_entries = self.cleanup_service.clean_directory(output_dir)
        except CleanupError as e:
            return self._abort(report, e, "El directorio de salida no quedó vacío")

        report.finished_at = datetime.now()
        duration = (report.finished_at - report.started_at).total_seconds()
        if report.failed_dumps:
            self.logger.warning(
                f"Backup completado con {len(report.failed_dumps)} base(s) fallida(s) en {duration:.2f}s"
            )
        else:
            self.logger.info(f"Backup completado exitosamente en {duration:.2f}s")
        return report

    def _abort(self, report: RunReport, error: Exception, consequence: str) -> RunReport:
        self.logger.error(f"{error}. {consequence}")
        report.error = str(error)
        report.finished_at = datetime.now()
        return report
