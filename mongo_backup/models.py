"""
Modelos de datos del sistema
"""
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote_plus


def validate_time_format(time_str: str) -> bool:
    """Valida formato de hora HH:MM"""
    try:
        parts = time_str.split(":")
        if len(parts) != 2 or len(parts[0]) != 2 or len(parts[1]) != 2:
            return False
        hours, minutes = int(parts[0]), int(parts[1])
        return 0 <= hours <= 23 and 0 <= minutes <= 59
    except (ValueError, AttributeError):
        return False


@dataclass
class MongoSettings:
    """Credenciales y parámetros de conexión al cluster"""
    username: str
    password: str
    cluster_host: str
    uri_scheme: str = "mongodb+srv"
    connect_timeout_seconds: float = 10.0
    dump_timeout_seconds: int = 3600

    def __post_init__(self):
        """Validación después de inicialización"""
        if not self.cluster_host:
            raise ValueError("El host del cluster es obligatorio")
        if self.connect_timeout_seconds <= 0:
            raise ValueError("connect_timeout_seconds debe ser mayor a 0")
        if self.dump_timeout_seconds <= 0:
            raise ValueError("dump_timeout_seconds debe ser mayor a 0")

    def cluster_uri(self, database: Optional[str] = None) -> str:
        """
        Construye el URI de conexión, opcionalmente limitado a una base

        Args:
            database: Nombre de la base de datos (opcional)

        Returns:
            URI de conexión con credenciales codificadas
        """
        return self._build_uri(quote_plus(self.password), database)

    def masked_uri(self, database: Optional[str] = None) -> str:
        """URI apto para logs, sin la contraseña"""
        return self._build_uri("****", database)

    def _build_uri(self, password: str, database: Optional[str]) -> str:
        uri = f"{self.uri_scheme}://{quote_plus(self.username)}:{password}@{self.cluster_host}"
        if database:
            uri += f"/{database}"
        return uri


@dataclass
class StorageSettings:
    """Configuración del bucket de destino"""
    bucket_name: str
    region: str
    access_key_id: str = ""
    secret_access_key: str = ""

    def __post_init__(self):
        """Validación después de inicialización"""
        if not self.bucket_name:
            raise ValueError("El nombre del bucket es obligatorio")
        if not self.region:
            raise ValueError("La región es obligatoria")
        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ValueError("AWS_ACCESS_KEY_ID y AWS_SECRET_ACCESS_KEY deben definirse juntos")

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


@dataclass
class AppSettings:
    """Configuración de la aplicación"""
    port: int = 8080
    backup_output_dir: Path = Path("./backup")
    archive_dir: Path = Path(".")
    schedule: str = "00:00"
    archive_include_time: bool = False

    def __post_init__(self):
        """Validación después de inicialización"""
        self.backup_output_dir = Path(self.backup_output_dir)
        self.archive_dir = Path(self.archive_dir)
        if not 0 < self.port < 65536:
            raise ValueError("El puerto debe estar entre 1 y 65535")
        if not validate_time_format(self.schedule):
            raise ValueError("El formato de schedule debe ser HH:MM")


@dataclass
class ServiceSettings:
    """Configuración completa del servicio"""
    mongo: MongoSettings
    storage: StorageSettings
    app: AppSettings


@dataclass
class DumpResult:
    """Resultado del dump de una base de datos"""
    database_name: str
    success: bool
    output_dir: Optional[str] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def __str__(self):
        if self.success:
            return f"✓ {self.database_name}: {self.output_dir} ({self.duration_seconds:.2f}s)"
        else:
            return f"✗ {self.database_name}: {self.error}"


@dataclass
class UploadResult:
    """Resultado de la subida del archivo al bucket"""
    key: str
    content_type: str
    size_bytes: int
    local_removed: bool = True


@dataclass
class RunReport:
    """Resumen de una ejecución completa del pipeline"""
    started_at: datetime
    finished_at: Optional[datetime] = None
    dump_results: List[DumpResult] = field(default_factory=list)
    archive_path: Optional[Path] = None
    upload: Optional[UploadResult] = None
    cleaned_entries: Optional[int] = None
    error: Optional[str] = None
    skipped: bool = False

    @property
    def failed_dumps(self) -> List[DumpResult]:
        return [r for r in self.dump_results if not r.success]

    @property
    def succeeded(self) -> bool:
        """True si el archivo se subió y el directorio se limpió"""
        return (
            not self.skipped
            and self.error is None
            and self.upload is not None
            and self.cleaned_entries is not None
        )
