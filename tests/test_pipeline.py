"""
Tests unitarios para el pipeline, el programador y el endpoint de liveness
"""
import unittest
import datetime
from pathlib import Path
import tempfile
import threading
import shutil
import sys

# Agregar la raíz del proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

import io
import zipfile

import schedule
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from mongo_backup.config import Config
from mongo_backup.exceptions import ArchiveError, ClusterConnectionError, CleanupError, UploadError
from mongo_backup.models import DumpResult, MongoSettings, RunReport, UploadResult
from mongo_backup.services.backup_service import BackupService
from mongo_backup.services.archive_service import ArchiveService
from mongo_backup.services.cleanup_service import CleanupService
from mongo_backup.services.pipeline_service import PipelineService
from mongo_backup.services.scheduler_service import SchedulerService
from mongo_backup.services.upload_service import UploadService
from mongo_backup.strategies.base_strategy import DumpStrategy
from mongo_backup.web_app import create_app


class FakeBackupService:
    """Escribe un dump por base de datos en output_dir"""

    def __init__(self, output_dir, databases=("sales", "users"), error=None, gate=None):
        self.output_dir = Path(output_dir)
        self.databases = databases
        self.error = error
        self.gate = gate
        self.started = threading.Event()
        self.calls = 0

    def backup_all_databases(self):
        self.calls += 1
        self.started.set()
        if self.gate:
            self.gate.wait(5)
        if self.error:
            raise self.error
        results = []
        for name in self.databases:
            target = self.output_dir / name
            target.mkdir(parents=True, exist_ok=True)
            (target / "dump.bson").write_bytes(name.encode())
            results.append(DumpResult(database_name=name, success=True, output_dir=str(target)))
        return results


class FakeS3Client:
    """Doble del cliente de S3"""

    def __init__(self):
        self.keys = []

    def put_object(self, **kwargs):
        kwargs['Body'].read()
        self.keys.append(kwargs['Key'])
        return {}


class FlakyS3Client:
    """Cliente de S3 que falla en las primeras subidas y guarda los cuerpos"""

    def __init__(self, failures=1):
        self.failures = failures
        self.bodies = []

    def put_object(self, **kwargs):
        if self.failures > 0:
            self.failures -= 1
            raise ClientError({'Error': {'Code': 'SlowDown', 'Message': 'try later'}}, 'PutObject')
        self.bodies.append(kwargs['Body'].read())
        return {}


class SequenceEnumerator:
    """Devuelve una lista distinta de bases en cada ejecución"""

    excluded = Config.EXCLUDED_DATABASES

    def __init__(self, *runs):
        self.runs = list(runs)

    def list_databases(self):
        return self.runs.pop(0)


class WritingStrategy(DumpStrategy):
    """Escribe un dump.bson por base de datos"""

    def dump(self, database_name, uri, output_dir):
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / "dump.bson").write_bytes(database_name.encode())
        return DumpResult(database_name=database_name, success=True, output_dir=str(output_dir))


class FailingArchiveService(ArchiveService):
    def archive_directory(self, source_dir, now=None):
        raise ArchiveError("disk full")


class FailingCleanupService(CleanupService):
    def clean_directory(self, directory):
        raise CleanupError("denied")


class TestPipelineService(unittest.TestCase):
    """Tests para PipelineService"""

    def setUp(self):
        """Setup para tests"""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.output_dir = self.temp_dir / "backup"
        self.archive_dir = self.temp_dir / "archives"
        self.s3 = FakeS3Client()

    def tearDown(self):
        """Cleanup después de tests"""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def _pipeline(self, backup=None, archive=None, cleanup=None, s3=None):
        return PipelineService(
            backup or FakeBackupService(self.output_dir),
            archive or ArchiveService(self.archive_dir),
            UploadService(s3 or self.s3, "backups"),
            cleanup or CleanupService()
        )

    def test_full_run(self):
        """Test ejecución completa: sube, borra el zip y vacía el directorio"""
        report = self._pipeline().run()

        self.assertTrue(report.succeeded)
        self.assertEqual([r.database_name for r in report.dump_results], ["sales", "users"])
        self.assertEqual(self.s3.keys, [report.archive_path.name])
        self.assertTrue(report.archive_path.name.startswith(Config.ARCHIVE_PREFIX))
        self.assertEqual(report.upload.content_type, "application/zip")
        self.assertFalse(report.archive_path.exists())
        self.assertEqual(report.cleaned_entries, 2)
        self.assertEqual(list(self.output_dir.iterdir()), [])

    def test_connection_error_abandons_run(self):
        """Test sin conexión no se comprime ni se sube nada"""
        backup = FakeBackupService(self.output_dir, error=ClusterConnectionError("unreachable"))
        report = self._pipeline(backup=backup).run()

        self.assertFalse(report.succeeded)
        self.assertIn("unreachable", report.error)
        self.assertIsNone(report.archive_path)
        self.assertEqual(self.s3.keys, [])

    def test_archive_error_skips_upload(self):
        """Test error de compresión no sube nada"""
        report = self._pipeline(archive=FailingArchiveService(self.archive_dir)).run()

        self.assertFalse(report.succeeded)
        self.assertIsNone(report.upload)
        self.assertEqual(self.s3.keys, [])
        self.assertTrue((self.output_dir / "sales").exists())

    def test_upload_error_keeps_local_files(self):
        """Test error de subida conserva archivo y dumps"""
        pipeline = PipelineService(
            FakeBackupService(self.output_dir),
            ArchiveService(self.archive_dir),
            FailingUploadService(),
            CleanupService()
        )
        report = pipeline.run()

        self.assertFalse(report.succeeded)
        self.assertIsNone(report.cleaned_entries)
        self.assertTrue(report.archive_path.exists())
        self.assertTrue((self.output_dir / "users").exists())

    def test_failed_run_leftovers_not_uploaded_next_run(self):
        """Test los dumps de una ejecución fallida no viajan en la siguiente"""
        mongo = MongoSettings(username="user", password="secret", cluster_host="cluster0.example.net")
        backup = BackupService(
            mongo, self.output_dir,
            enumerator=SequenceEnumerator(["olddb"], ["sales"]),
            strategy=WritingStrategy()
        )
        s3 = FlakyS3Client(failures=1)
        pipeline = self._pipeline(backup=backup, s3=s3)

        first = pipeline.run()
        self.assertFalse(first.succeeded)
        self.assertTrue((self.output_dir / "olddb").exists())

        second = pipeline.run()
        self.assertTrue(second.succeeded)
        self.assertEqual(len(s3.bodies), 1)
        with zipfile.ZipFile(io.BytesIO(s3.bodies[0])) as archive:
            names = archive.namelist()
        self.assertEqual(sorted(names), ["sales/", "sales/dump.bson"])

    def test_cleanup_error_before_dumps_abandons_run(self):
        """Test sin poder vaciar el directorio no se hace ningún dump"""
        mongo = MongoSettings(username="user", password="secret", cluster_host="cluster0.example.net")
        backup = BackupService(
            mongo, self.output_dir,
            enumerator=SequenceEnumerator(["sales"]),
            strategy=WritingStrategy(),
            cleanup_service=FailingCleanupService()
        )
        report = self._pipeline(backup=backup).run()

        self.assertFalse(report.succeeded)
        self.assertIn("denied", report.error)
        self.assertEqual(report.dump_results, [])
        self.assertEqual(self.s3.keys, [])

    def test_cleanup_error_reported(self):
        """Test error de limpieza se informa en el reporte"""
        report = self._pipeline(cleanup=FailingCleanupService()).run()

        self.assertFalse(report.succeeded)
        self.assertIsNotNone(report.upload)
        self.assertIn("denied", report.error)

    def test_overlapping_run_is_skipped(self):
        """Test una ejecución en curso bloquea la siguiente"""
        gate = threading.Event()
        backup = FakeBackupService(self.output_dir, gate=gate)
        pipeline = self._pipeline(backup=backup)

        first = {}
        worker = threading.Thread(target=lambda: first.setdefault('report', pipeline.run()))
        worker.start()
        self.assertTrue(backup.started.wait(5))

        self.assertTrue(pipeline.is_running)
        second = pipeline.run()
        self.assertTrue(second.skipped)

        gate.set()
        worker.join(5)
        self.assertTrue(first['report'].succeeded)
        self.assertEqual(backup.calls, 1)
        self.assertFalse(pipeline.is_running)


class FailingUploadService:
    """Servicio de subida que siempre falla"""

    def upload_archive(self, archive_path):
        raise UploadError("failed to upload to S3: timeout")


class FakePipeline:
    """Pipeline que cuenta ejecuciones"""

    def __init__(self, error=None):
        self.error = error
        self.runs = 0
        self.ran = threading.Event()

    def run(self):
        self.runs += 1
        self.ran.set()
        if self.error:
            raise self.error
        return RunReport(
            started_at=datetime.datetime.now(),
            upload=UploadResult(key="k.zip", content_type="application/zip", size_bytes=1),
            cleaned_entries=0
        )


class TestSchedulerService(unittest.TestCase):
    """Tests para SchedulerService"""

    def test_registers_daily_job_at_midnight(self):
        """Test tarea diaria a las 00:00"""
        scheduler = schedule.Scheduler()
        service = SchedulerService(FakePipeline(), scheduler=scheduler)
        job = service.register()

        self.assertEqual(scheduler.jobs, [job])
        self.assertEqual(job.unit, "days")
        self.assertEqual(job.interval, 1)
        self.assertEqual(job.at_time, datetime.time(0, 0))
        self.assertEqual(job.next_run.time(), datetime.time(0, 0))
        self.assertIs(service.register(), job)

    def test_job_runs_pipeline(self):
        """Test la tarea ejecuta el pipeline"""
        pipeline = FakePipeline()
        scheduler = schedule.Scheduler()
        service = SchedulerService(pipeline, scheduler=scheduler)
        service.register()

        scheduler.run_all()
        self.assertEqual(pipeline.runs, 1)

    def test_job_errors_are_contained(self):
        """Test un error del pipeline no detiene el programador"""
        pipeline = FakePipeline(error=RuntimeError("unexpected"))
        service = SchedulerService(pipeline, scheduler=schedule.Scheduler())
        service._run_daily_backup_job()
        self.assertEqual(pipeline.runs, 1)

    def test_background_run_immediately_and_stop(self):
        """Test hilo en segundo plano con ejecución inicial"""
        pipeline = FakePipeline()
        service = SchedulerService(pipeline, scheduler=schedule.Scheduler(), poll_seconds=0.05)
        thread = service.start_background(run_immediately=True)

        self.assertTrue(pipeline.ran.wait(5))
        service.stop(timeout=5)
        self.assertFalse(thread.is_alive())
        self.assertEqual(service.get_next_run(), "No hay ejecuciones programadas")

    def test_get_next_run(self):
        """Test próxima ejecución formateada"""
        service = SchedulerService(FakePipeline(), scheduler=schedule.Scheduler())
        service.register()
        self.assertTrue(service.get_next_run().endswith("00:00:00"))


class TestLivenessEndpoint(unittest.TestCase):
    """Tests para el endpoint de liveness"""

    def setUp(self):
        """Setup para tests"""
        self.client = TestClient(create_app())

    def test_root_returns_fixed_message(self):
        """Test GET / responde el mensaje fijo"""
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, Config.LIVENESS_MESSAGE)
        self.assertTrue(response.headers["content-type"].startswith("text/plain"))

    def test_no_other_routes(self):
        """Test no hay otras rutas"""
        self.assertEqual(self.client.get("/docs").status_code, 404)
        self.assertEqual(self.client.post("/").status_code, 405)


if __name__ == '__main__':
    unittest.main(verbosity=2)
