"""
Excepciones del servicio de backup
"""
from typing import Optional


class BackupError(Exception):
    """Excepción base para todos los errores del servicio"""

    def __init__(self, message: str, code: Optional[str] = None):
        """
        Inicializa la excepción

        Args:
            message: Mensaje de error descriptivo
            code: Código de error opcional
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def __str__(self):
        return f"[{self.code}] {self.message}"


class ConfigurationError(BackupError):
    """Configuración ausente o inválida al iniciar"""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION")


class ClusterConnectionError(BackupError):
    """No se pudo conectar al cluster o listar sus bases de datos"""

    def __init__(self, message: str):
        super().__init__(message, code="CLUSTER_CONNECTION")


class ArchiveError(BackupError):
    """Fallo al construir el archivo comprimido"""

    def __init__(self, message: str):
        super().__init__(message, code="ARCHIVE")


class UploadError(BackupError):
    """Fallo al subir el archivo al bucket"""

    def __init__(self, message: str):
        super().__init__(message, code="UPLOAD")


class CleanupError(BackupError):
    """Fallo al limpiar el directorio de salida"""

    def __init__(self, message: str):
        super().__init__(message, code="CLEANUP")
