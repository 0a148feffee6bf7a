"""
Enumeración de las bases de datos del cluster
"""
from typing import Callable, Iterable, List
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from ..config import Config
from ..exceptions import ClusterConnectionError
from ..logger import LoggerService
from ..models import MongoSettings


def filter_databases(names: Iterable[str], excluded: Iterable[str] = Config.EXCLUDED_DATABASES) -> List[str]:
    """
    Descarta las bases internas conservando el orden recibido

    Args:
        names: Nombres devueltos por el cluster
        excluded: Nombres a excluir

    Returns:
        Lista filtrada
    """
    excluded = set(excluded)
    return [name for name in names if name not in excluded]


class DatabaseEnumerator:
    """Lista las bases de datos visibles para el usuario autenticado"""

    def __init__(self, mongo_settings: MongoSettings,
                 client_factory: Callable[..., MongoClient] = MongoClient,
                 excluded: Iterable[str] = Config.EXCLUDED_DATABASES):
        """
        Inicializa el enumerador

        Args:
            mongo_settings: Configuración de conexión
            client_factory: Constructor del cliente (inyectable en tests)
            excluded: Bases de datos que nunca se respaldan
        """
        self.mongo_settings = mongo_settings
        self.client_factory = client_factory
        self.excluded = frozenset(excluded)
        self.logger = LoggerService.get_logger("DatabaseEnumerator")

    def list_databases(self) -> List[str]:
        """
        Conecta al cluster y devuelve las bases de datos a respaldar

        Returns:
            Nombres de bases de datos sin las bases internas

        Raises:
            ClusterConnectionError: Si no se puede conectar o listar
        """
        timeout_ms = int(self.mongo_settings.connect_timeout_seconds * 1000)
        self.logger.info(f"Conectando a {self.mongo_settings.masked_uri()}")

        try:
            client = self.client_factory(
                self.mongo_settings.cluster_uri(),
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms
            )
        except PyMongoError as e:
            raise ClusterConnectionError(f"Failed to connect to MongoDB: {e}") from e

        try:
            names = client.list_database_names()
        except PyMongoError as e:
            raise ClusterConnectionError(f"Failed to list databases: {e}") from e
        finally:
            client.close()

        databases = filter_databases(names, self.excluded)
        skipped = len(names) - len(databases)
        self.logger.info(
            f"Bases de datos encontradas: {len(names)} "
            f"({len(databases)} a respaldar, {skipped} internas omitidas)"
        )
        return databases
