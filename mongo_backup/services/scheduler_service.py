"""
Servicio de programación del backup diario
"""
import threading
import time
from typing import Optional
import schedule
from ..config import Config
from ..logger import LoggerService
from .pipeline_service import PipelineService


class SchedulerService:
    """Servicio para programar y ejecutar el backup automático"""

    def __init__(self, pipeline: PipelineService, schedule_time: str = Config.BACKUP_TIME,
                 scheduler: Optional[schedule.Scheduler] = None,
                 poll_seconds: float = Config.SCHEDULER_POLL_SECONDS):
        """
        Inicializa el servicio de programación

        Args:
            pipeline: Pipeline a ejecutar
            schedule_time: Hora local diaria (HH:MM)
            scheduler: Instancia de schedule.Scheduler (opcional)
            poll_seconds: Intervalo de revisión de tareas pendientes
        """
        self.pipeline = pipeline
        self.schedule_time = schedule_time
        self.scheduler = scheduler or schedule.Scheduler()
        self.poll_seconds = poll_seconds
        self.logger = LoggerService.get_logger("SchedulerService")
        self._stop_event = threading.Event()
        self._thread = None
        self.job = None

    def register(self) -> schedule.Job:
        """Registra la tarea diaria si aún no existe"""
        if self.job is None:
            self.job = self.scheduler.every().day.at(self.schedule_time).do(self._run_daily_backup_job)
        return self.job

    def run_forever(self, run_immediately: bool = False):
        """
        Ejecuta el loop de tareas en el hilo actual hasta que se llame a stop()

        Args:
            run_immediately: Si es True, ejecuta un backup al iniciar
        """
        self.register()

        self.logger.info("=" * 70)
        self.logger.info("SERVICIO DE BACKUP AUTOMÁTICO INICIADO")
        self.logger.info("=" * 70)
        self.logger.info(f"Backup diario programado a las {self.schedule_time} (hora local)")
        self.logger.info(f"Próxima ejecución: {self.get_next_run()}")
        self.logger.info("=" * 70)

        if run_immediately:
            self.logger.info("Ejecutando backup inicial...")
            self._run_daily_backup_job()

        while not self._stop_event.is_set():
            self.scheduler.run_pending()
            self._stop_event.wait(self.poll_seconds)

        self.logger.info("Servicio de programación detenido")

    def start_background(self, run_immediately: bool = False) -> threading.Thread:
        """
        Inicia el loop de tareas en un hilo daemon

        Args:
            run_immediately: Si es True, ejecuta un backup al iniciar

        Returns:
            Hilo del programador
        """
        if self._thread and self._thread.is_alive():
            return self._thread

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever,
            kwargs={'run_immediately': run_immediately},
            name="backup-scheduler",
            daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None):
        """Detiene el servicio de forma ordenada"""
        self.logger.info("Deteniendo servicio de backup...")
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self.scheduler.clear()
        self.job = None

    def _run_daily_backup_job(self):
        """Ejecuta el trabajo de backup diario"""
        try:
            self.logger.info(f"Ejecutando backup programado a las {time.strftime('%Y-%m-%d %H:%M:%S')}")
            report = self.pipeline.run()

            if report.skipped:
                return
            if report.succeeded:
                self.logger.info(f"Archivo subido: {report.upload.key}")
            else:
                self.logger.warning(f"Backup diario incompleto: {report.error}")
        except Exception as e:
            self.logger.error(f"Error crítico durante backup: {e}", exc_info=True)

    def get_next_run(self) -> str:
        """
        Obtiene la fecha de la próxima ejecución

        Returns:
            String con la próxima ejecución
        """
        next_run = self.scheduler.next_run
        if next_run:
            return next_run.strftime('%Y-%m-%d %H:%M:%S')
        return "No hay ejecuciones programadas"
