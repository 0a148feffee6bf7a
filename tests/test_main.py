"""
Tests del punto de entrada
"""
import unittest
from pathlib import Path
from unittest import mock
import sys

# Agregar la raíz del proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from mongo_backup.exceptions import ConfigurationError
from mongo_backup.models import AppSettings, MongoSettings, ServiceSettings, StorageSettings
from mongo_backup.services.pipeline_service import PipelineService


def make_settings():
    return ServiceSettings(
        mongo=MongoSettings(username="user", password="secret", cluster_host="cluster0.example.net"),
        storage=StorageSettings(
            bucket_name="backups", region="us-east-1",
            access_key_id="AKIAEXAMPLE", secret_access_key="secret"
        ),
        app=AppSettings()
    )


class TestMain(unittest.TestCase):
    """Tests para main.py"""

    def test_parse_default_mode(self):
        """Test modo por defecto"""
        args = main.parse_arguments([])
        self.assertEqual(args.mode, 'scheduler')
        self.assertFalse(args.now)

    def test_parse_once_and_db(self):
        """Test modo once y --db"""
        self.assertEqual(main.parse_arguments(['once']).mode, 'once')
        self.assertEqual(main.parse_arguments(['--db', 'sales']).db, 'sales')

    def test_build_pipeline(self):
        """Test construcción del pipeline"""
        pipeline = main.build_pipeline(make_settings())
        self.assertIsInstance(pipeline, PipelineService)
        self.assertEqual(pipeline.upload_service.bucket_name, "backups")
        self.assertEqual(pipeline.backup_service.output_dir, Path("./backup"))

    def test_configuration_error_exits(self):
        """Test error de configuración termina el proceso"""
        with mock.patch.object(main, "ConfigRepository") as repo_class:
            repo_class.return_value.load_settings.side_effect = ConfigurationError("missing")
            with self.assertRaises(SystemExit) as ctx:
                main.main(['once'])
        self.assertEqual(ctx.exception.code, 1)

    def test_once_exit_code(self):
        """Test código de salida del modo once"""
        report = mock.Mock(succeeded=False)
        with mock.patch.object(main, "ConfigRepository") as repo_class, \
                mock.patch.object(main, "build_pipeline") as build:
            repo_class.return_value.load_settings.return_value = make_settings()
            build.return_value.run.return_value = report
            with self.assertRaises(SystemExit) as ctx:
                main.main(['once'])
        self.assertEqual(ctx.exception.code, 1)


if __name__ == '__main__':
    unittest.main(verbosity=2)
