"""
Configuración centralizada del servicio de backup de MongoDB
"""
import logging
import os
from pathlib import Path
from dotenv import find_dotenv, load_dotenv


class Config:
    """Constantes y rutas del servicio"""

    # Archivo .env buscado desde el directorio de trabajo
    ENV_FILE = find_dotenv(usecwd=True)

    # Cargar el .env sin pisar las variables de entorno ya definidas
    if ENV_FILE:
        load_dotenv(ENV_FILE)

    # BASE_DIR debe ser la raíz donde está main.py
    BASE_DIR = Path(ENV_FILE).parent if ENV_FILE else Path(__file__).resolve().parents[1]

    LOG_DIR = Path(os.getenv("LOG_DIR")) if os.getenv("LOG_DIR") else (BASE_DIR / "Logs")
    EXAMPLE_ENV_FILE = BASE_DIR / ".env.example"

    LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Bases internas del cluster que nunca se respaldan
    EXCLUDED_DATABASES = frozenset({'admin', 'local', 'config'})

    BACKUP_TIME = "00:00"  # Hora local de ejecución diaria
    SCHEDULER_POLL_SECONDS = 30

    DEFAULT_OUTPUT_DIR = "./backup"
    DEFAULT_ARCHIVE_DIR = "."
    DEFAULT_APP_PORT = 8080
    DEFAULT_URI_SCHEME = "mongodb+srv"
    DEFAULT_CONNECT_TIMEOUT = 10.0  # segundos
    DEFAULT_DUMP_TIMEOUT = 3600  # segundos

    DUMP_TOOL = "mongodump"
    ARCHIVE_PREFIX = "mongodb-dump-"
    ARCHIVE_DATE_FORMAT = "%Y-%m-%d"
    ARCHIVE_TIME_FORMAT = "%H%M%S"

    # Bytes iniciales usados para detectar el content-type
    SNIFF_LEN = 512

    LIVENESS_MESSAGE = "MongoDB Backup service is up..."

    EXAMPLE_ENV = """# Variables de entorno del servicio de backup
# Copia este archivo como .env y completa con tus credenciales

# MongoDB
MONGO_USERNAME=backup_user
MONGO_PASSWORD=tu_password_seguro
MONGO_CLUSTER_URI=cluster0.example.mongodb.net
BACKUP_OUTPUT_DIR=./backup

# AWS S3
AWS_ACCESS_KEY_ID=
AWS_SECRET_ACCESS_KEY=
AWS_REGION=us-east-1
AWS_BUCKET_NAME=mi-bucket-de-backups

# Aplicación
APP_PORT=8080
"""

    @classmethod
    def ensure_directories(cls):
        """Crea los directorios necesarios si no existen"""
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
