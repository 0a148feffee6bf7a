"""
Estrategias de dump para las herramientas externas
"""
from .base_strategy import DumpStrategy
from .mongodump_strategy import MongoDumpStrategy

__all__ = [
    'DumpStrategy',
    'MongoDumpStrategy'
]
