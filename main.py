#!/usr/bin/env python3
"""
Servicio de backup nocturno de MongoDB a S3
Punto de entrada principal

Uso:
    python main.py                  # Servidor de liveness + backup diario a las 00:00
    python main.py once             # Ejecutar el pipeline completo una vez
    python main.py --db nombre_db   # Dump de una BD específica
    python main.py --help           # Ayuda
"""
import sys
import argparse
from pathlib import Path

# Agregar la raíz del proyecto al path
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn

from mongo_backup.exceptions import ConfigurationError
from mongo_backup.logger import LoggerService
from mongo_backup.models import ServiceSettings
from mongo_backup.repositories.config_repository import ConfigRepository
from mongo_backup.services.archive_service import ArchiveService
from mongo_backup.services.backup_service import BackupService
from mongo_backup.services.cleanup_service import CleanupService
from mongo_backup.services.pipeline_service import PipelineService
from mongo_backup.services.scheduler_service import SchedulerService
from mongo_backup.services.upload_service import UploadService, create_s3_client
from mongo_backup.web_app import create_app


def parse_arguments(argv=None):
    """
    Parsea argumentos de línea de comandos

    Returns:
        Namespace con los argumentos parseados
    """
    parser = argparse.ArgumentParser(
        description='Servicio de backup nocturno de MongoDB a S3',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos:
  python main.py                    # Iniciar servicio automático
  python main.py once               # Ejecutar backup una sola vez
  python main.py --db mi_db         # Dump de una base específica
  python main.py --stats            # Ver estadísticas del directorio de salida
  python main.py --init             # Crear .env.example
        """
    )

    parser.add_argument(
        'mode',
        nargs='?',
        choices=['once', 'scheduler'],
        default='scheduler',
        help='Modo de ejecución (default: scheduler)'
    )

    parser.add_argument(
        '--db',
        type=str,
        metavar='NOMBRE',
        help='Realizar el dump de una base de datos específica'
    )

    parser.add_argument(
        '--stats',
        action='store_true',
        help='Mostrar estadísticas del directorio de salida'
    )

    parser.add_argument(
        '--init',
        action='store_true',
        help='Crear archivo .env.example'
    )

    parser.add_argument(
        '--now',
        action='store_true',
        help='Ejecutar backup inmediatamente al iniciar scheduler'
    )

    return parser.parse_args(argv)


def build_pipeline(settings: ServiceSettings) -> PipelineService:
    """
    Construye el pipeline con sus dependencias

    Args:
        settings: Configuración del servicio

    Returns:
        Pipeline listo para ejecutar
    """
    cleanup_service = CleanupService()
    backup_service = BackupService(
        settings.mongo,
        settings.app.backup_output_dir,
        cleanup_service=cleanup_service
    )
    archive_service = ArchiveService(settings.app.archive_dir, settings.app.archive_include_time)
    upload_service = UploadService(create_s3_client(settings.storage), settings.storage.bucket_name)
    return PipelineService(backup_service, archive_service, upload_service, cleanup_service)


def show_statistics(settings: ServiceSettings):
    """
    Muestra estadísticas del directorio de salida

    Args:
        settings: Configuración del servicio
    """
    logger = LoggerService.get_logger("Stats")
    stats = CleanupService().get_directory_stats(settings.app.backup_output_dir)

    logger.info("=" * 70)
    logger.info("ESTADÍSTICAS DEL DIRECTORIO DE SALIDA")
    logger.info("=" * 70)
    logger.info(f"Directorio: {settings.app.backup_output_dir}")
    logger.info(f"Entradas: {stats['entries']}")
    logger.info(f"Total de archivos: {stats['total_files']}")
    logger.info(f"Espacio utilizado: {stats['total_size_mb']:.2f} MB")
    logger.info("=" * 70)


def serve(settings: ServiceSettings, run_immediately: bool = False):
    """
    Inicia el programador en segundo plano y el servidor de liveness

    Args:
        settings: Configuración del servicio
        run_immediately: Ejecutar un backup al iniciar
    """
    logger = LoggerService.get_logger("Main")
    scheduler = SchedulerService(build_pipeline(settings), settings.app.schedule)
    scheduler.start_background(run_immediately=run_immediately)

    logger.info(f"Server listening on port :{settings.app.port}")
    try:
        uvicorn.run(create_app(), host="0.0.0.0", port=settings.app.port)
    finally:
        scheduler.stop(timeout=5)


def main(argv=None):
    """Función principal"""
    args = parse_arguments(argv)
    logger = LoggerService.get_logger("Main")
    config_repo = ConfigRepository()

    # Modo inicialización
    if args.init:
        if config_repo.create_example_env():
            logger.info("Copia .env.example como .env y completa tus credenciales")
        return

    try:
        settings = config_repo.load_settings()
    except ConfigurationError as e:
        logger.error(f"Error loading configuration: {e}")
        logger.error("Ejecuta: python main.py --init")
        sys.exit(1)

    # Modo estadísticas
    if args.stats:
        show_statistics(settings)
        return

    # Modo dump específico
    if args.db:
        logger.info(f"Realizando dump de: {args.db}")
        result = BackupService(settings.mongo, settings.app.backup_output_dir).backup_specific_database(args.db)
        if result.success:
            logger.info(f"✓ Dump exitoso: {result.output_dir}")
            sys.exit(0)
        else:
            logger.error(f"✗ Dump fallido: {result.error}")
            sys.exit(1)

    # Modo once (una sola ejecución)
    if args.mode == 'once':
        logger.info("Modo: Ejecución única")
        report = build_pipeline(settings).run()
        sys.exit(0 if report.succeeded else 1)

    # Modo scheduler (por defecto)
    serve(settings, run_immediately=args.now)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nPrograma interrumpido por el usuario")
        sys.exit(0)
    except Exception as e:
        print(f"Error crítico: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
