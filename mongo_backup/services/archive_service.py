"""
Servicio que comprime el directorio de dumps en un único archivo zip
"""
import os
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Optional
from ..config import Config
from ..exceptions import ArchiveError
from ..logger import LoggerService


def _raise_walk_error(error: OSError):
    raise error


class ArchiveService:
    """Servicio de compresión de los dumps"""

    def __init__(self, archive_dir: Path = Path(Config.DEFAULT_ARCHIVE_DIR), include_time: bool = False):
        """
        Inicializa el servicio

        Args:
            archive_dir: Directorio donde se crea el archivo
            include_time: Incluir la hora en el nombre del archivo
        """
        self.archive_dir = Path(archive_dir)
        self.include_time = include_time
        self.logger = LoggerService.get_logger("ArchiveService")

    def archive_name(self, now: Optional[datetime] = None) -> str:
        """
        Genera el nombre del archivo de la ejecución

        Sin hora, dos ejecuciones del mismo día producen el mismo nombre
        y la última reemplaza a la anterior en el bucket.

        Args:
            now: Fecha de la ejecución (por defecto, ahora)

        Returns:
            Nombre del archivo, p. ej. mongodb-dump-2024-05-01.zip
        """
        now = now or datetime.now()
        stamp = now.strftime(Config.ARCHIVE_DATE_FORMAT)
        if self.include_time:
            stamp += "_" + now.strftime(Config.ARCHIVE_TIME_FORMAT)
        return f"{Config.ARCHIVE_PREFIX}{stamp}.zip"

    def archive_directory(self, source_dir: Path, now: Optional[datetime] = None) -> Path:
        """
        Comprime el directorio de dumps en archive_dir

        Args:
            source_dir: Directorio de dumps
            now: Fecha de la ejecución (opcional)

        Returns:
            Ruta del archivo creado
        """
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        return self.create_archive(source_dir, self.archive_dir / self.archive_name(now))

    def create_archive(self, source_dir: Path, target: Path) -> Path:
        """
        Recorre source_dir y escribe cada directorio y archivo en un zip

        Los nombres son rutas relativas a source_dir con separador '/';
        los directorios terminan en '/' y los archivos se comprimen.

        Args:
            source_dir: Directorio a comprimir
            target: Ruta del archivo zip

        Returns:
            Ruta del archivo creado

        Raises:
            ArchiveError: Si falla cualquier paso; no queda archivo parcial
        """
        source_dir = Path(source_dir)
        target = Path(target)
        if not source_dir.is_dir():
            raise ArchiveError(f"El directorio de origen no existe: {source_dir}")

        self.logger.info(f"Comprimiendo {source_dir} en {target}")
        entries = 0
        try:
            with zipfile.ZipFile(target, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
                for root, dirs, files in os.walk(source_dir, onerror=_raise_walk_error):
                    dirs.sort()
                    root_path = Path(root)
                    for name in dirs:
                        path = root_path / name
                        archive.write(path, self._arcname(path, source_dir), compress_type=zipfile.ZIP_STORED)
                        entries += 1
                    for name in sorted(files):
                        path = root_path / name
                        if path.resolve() == target.resolve():
                            continue
                        archive.write(path, self._arcname(path, source_dir), compress_type=zipfile.ZIP_DEFLATED)
                        entries += 1
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            self._remove_partial(target)
            raise ArchiveError(f"Failed to zip backup folder: {e}") from e

        size_mb = target.stat().st_size / (1024 * 1024)
        self.logger.info(f"Archivo creado: {target.name} ({entries} entradas, {size_mb:.2f} MB)")
        return target

    @staticmethod
    def _arcname(path: Path, source_dir: Path) -> str:
        name = path.relative_to(source_dir).as_posix()
        return name + "/" if path.is_dir() else name

    def _remove_partial(self, target: Path):
        try:
            target.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"No se pudo eliminar el archivo parcial {target}: {e}")
