"""
Servicios de la aplicación
"""
from .archive_service import ArchiveService
from .backup_service import BackupService
from .cleanup_service import CleanupService
from .database_enumerator import DatabaseEnumerator, filter_databases
from .pipeline_service import PipelineService
from .scheduler_service import SchedulerService
from .upload_service import UploadService, create_s3_client

__all__ = [
    'ArchiveService',
    'BackupService',
    'CleanupService',
    'DatabaseEnumerator',
    'PipelineService',
    'SchedulerService',
    'UploadService',
    'create_s3_client',
    'filter_databases'
]
