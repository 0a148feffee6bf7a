"""
Servicio de subida del archivo de backup a S3
"""
from pathlib import Path
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from ..config import Config
from ..content_type import detect_content_type
from ..exceptions import UploadError
from ..logger import LoggerService
from ..models import StorageSettings, UploadResult


def create_s3_client(storage_settings: StorageSettings):
    """
    Crea el cliente de S3 a partir de la configuración

    Sin claves estáticas se usa la cadena de credenciales por defecto de boto3.

    Args:
        storage_settings: Configuración del bucket

    Returns:
        Cliente de S3
    """
    kwargs = {'region_name': storage_settings.region}
    if storage_settings.has_static_credentials:
        kwargs['aws_access_key_id'] = storage_settings.access_key_id
        kwargs['aws_secret_access_key'] = storage_settings.secret_access_key
    return boto3.client('s3', **kwargs)


class UploadService:
    """Sube el archivo de backup y elimina la copia local"""

    def __init__(self, s3_client, bucket_name: str):
        """
        Inicializa el servicio

        Args:
            s3_client: Cliente de S3 (boto3 o un doble de pruebas)
            bucket_name: Bucket de destino
        """
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.logger = LoggerService.get_logger("UploadService")

    def upload_archive(self, archive_path: Path) -> UploadResult:
        """
        Sube el archivo con clave igual a su nombre y luego lo borra localmente

        Args:
            archive_path: Ruta del archivo zip

        Returns:
            Resultado de la subida

        Raises:
            UploadError: Si no se puede leer el archivo o falla la escritura remota
        """
        archive_path = Path(archive_path)
        key = archive_path.name

        try:
            with open(archive_path, 'rb') as file:
                content_type = detect_content_type(file.read(Config.SNIFF_LEN))
                file.seek(0)
                size_bytes = archive_path.stat().st_size

                self.logger.info(f"Subiendo {key} a s3://{self.bucket_name} ({content_type})")
                self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=file,
                    ContentType=content_type
                )
        except (ClientError, BotoCoreError) as e:
            raise UploadError(f"failed to upload to S3: {e}") from e
        except OSError as e:
            raise UploadError(f"failed to read zipped backup {archive_path}: {e}") from e

        self.logger.info(f"Backup uploaded to S3 successfully as {key}")

        return UploadResult(
            key=key,
            content_type=content_type,
            size_bytes=size_bytes,
            local_removed=self._remove_local(archive_path)
        )

    def _remove_local(self, archive_path: Path) -> bool:
        """
        Elimina el archivo local tras la subida

        Los errores se registran y se informan, nunca detienen el proceso.

        Returns:
            True si el archivo ya no existe localmente por nuestra acción
        """
        try:
            archive_path.unlink()
        except FileNotFoundError:
            self.logger.warning(f"File not found: {archive_path}")
            return False
        except OSError as e:
            self.logger.error(f"Error removing file {archive_path}: {e}")
            return False

        self.logger.info(f"File {archive_path} removed successfully.")
        return True
