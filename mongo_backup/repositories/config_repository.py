"""
Repositorio para cargar la configuración desde .env y variables de entorno
"""
import os
from pathlib import Path
from typing import Dict, Mapping, Optional
from dotenv import dotenv_values
from ..config import Config
from ..exceptions import ConfigurationError
from ..logger import LoggerService
from ..models import AppSettings, MongoSettings, ServiceSettings, StorageSettings


class ConfigRepository:
    """Repositorio de configuración"""

    REQUIRED_KEYS = (
        'MONGO_USERNAME',
        'MONGO_PASSWORD',
        'MONGO_CLUSTER_URI',
        'AWS_REGION',
        'AWS_BUCKET_NAME',
    )

    TRUE_VALUES = {'1', 'true', 'yes', 'on'}
    FALSE_VALUES = {'0', 'false', 'no', 'off', ''}

    def __init__(self, env_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Inicializa el repositorio de configuración

        Args:
            env_file: Ruta al archivo .env (opcional)
            environ: Variables de entorno a superponer (por defecto os.environ)
        """
        if env_file is not None:
            self.env_file = Path(env_file)
        else:
            self.env_file = Path(Config.ENV_FILE) if Config.ENV_FILE else Config.BASE_DIR / ".env"
        self.environ = os.environ if environ is None else environ
        self.logger = LoggerService.get_logger("ConfigRepository")
        self._raw_config = None

    def load(self) -> Dict[str, str]:
        """
        Carga los valores del archivo .env; las variables de entorno tienen prioridad

        Returns:
            Diccionario con la configuración
        """
        values = {}
        if self.env_file.exists():
            values.update({k: v for k, v in dotenv_values(self.env_file).items() if v is not None})
            self.logger.info(f"Configuración cargada exitosamente: {self.env_file}")
        else:
            self.logger.warning(f"El archivo .env no existe: {self.env_file}, usando variables de entorno")

        values.update(self.environ)
        self._raw_config = values
        return self._raw_config

    def load_settings(self) -> ServiceSettings:
        """
        Construye la configuración completa del servicio

        Returns:
            Objeto ServiceSettings

        Raises:
            ConfigurationError: Si falta una clave obligatoria o un valor es inválido
        """
        raw = self.load()

        missing = [key for key in self.REQUIRED_KEYS if not raw.get(key)]
        if missing:
            raise ConfigurationError(f"Faltan variables de configuración: {', '.join(missing)}")

        try:
            return ServiceSettings(
                mongo=self.get_mongo_settings(),
                storage=self.get_storage_settings(),
                app=self.get_app_settings()
            )
        except ValueError as e:
            raise ConfigurationError(f"Configuración inválida: {e}") from e

    def get_mongo_settings(self) -> MongoSettings:
        """
        Obtiene la configuración de conexión al cluster

        Returns:
            Objeto MongoSettings
        """
        raw = self._raw()
        return MongoSettings(
            username=raw.get('MONGO_USERNAME', ''),
            password=raw.get('MONGO_PASSWORD', ''),
            cluster_host=raw.get('MONGO_CLUSTER_URI', ''),
            uri_scheme=raw.get('MONGO_URI_SCHEME') or Config.DEFAULT_URI_SCHEME,
            connect_timeout_seconds=self._get_float('MONGO_CONNECT_TIMEOUT', Config.DEFAULT_CONNECT_TIMEOUT),
            dump_timeout_seconds=self._get_int('MONGODUMP_TIMEOUT', Config.DEFAULT_DUMP_TIMEOUT)
        )

    def get_storage_settings(self) -> StorageSettings:
        """
        Obtiene la configuración del bucket

        Returns:
            Objeto StorageSettings
        """
        raw = self._raw()
        return StorageSettings(
            bucket_name=raw.get('AWS_BUCKET_NAME', ''),
            region=raw.get('AWS_REGION', ''),
            access_key_id=raw.get('AWS_ACCESS_KEY_ID', ''),
            secret_access_key=raw.get('AWS_SECRET_ACCESS_KEY', '')
        )

    def get_app_settings(self) -> AppSettings:
        """
        Obtiene la configuración de la aplicación

        Returns:
            Objeto AppSettings
        """
        raw = self._raw()
        return AppSettings(
            port=self._get_int('APP_PORT', Config.DEFAULT_APP_PORT),
            backup_output_dir=Path(raw.get('BACKUP_OUTPUT_DIR') or Config.DEFAULT_OUTPUT_DIR),
            archive_dir=Path(raw.get('ARCHIVE_DIR') or Config.DEFAULT_ARCHIVE_DIR),
            schedule=Config.BACKUP_TIME,
            archive_include_time=self._get_bool('ARCHIVE_INCLUDE_TIME', False)
        )

    def create_example_env(self, target: Optional[Path] = None) -> bool:
        """
        Crea un archivo .env de ejemplo

        Args:
            target: Ruta de destino (por defecto Config.EXAMPLE_ENV_FILE)

        Returns:
            True si se creó exitosamente
        """
        target = Path(target) if target else Config.EXAMPLE_ENV_FILE
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(Config.EXAMPLE_ENV, encoding='utf-8')
            self.logger.info(f"Creado: {target}")
            return True
        except OSError as e:
            self.logger.error(f"Error creando {target}: {e}")
            return False

    def _raw(self) -> Dict[str, str]:
        if self._raw_config is None:
            self.load()
        return self._raw_config

    def _get_int(self, key: str, default: int) -> int:
        value = self._raw().get(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} debe ser un entero: {value!r}")

    def _get_float(self, key: str, default: float) -> float:
        value = self._raw().get(key)
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"{key} debe ser un número: {value!r}")

    def _get_bool(self, key: str, default: bool) -> bool:
        value = self._raw().get(key)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in self.TRUE_VALUES:
            return True
        if normalized in self.FALSE_VALUES:
            return False
        raise ValueError(f"{key} debe ser booleano: {value!r}")
