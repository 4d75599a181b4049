"""
Storage package for ClipPocket.

Provides the key-value store and the persistence gateway used by the stores.
"""

from clippocket.database.defaults_store import DefaultsStore
from clippocket.database.persistence import PersistenceGateway

__all__ = [
    'DefaultsStore',
    'PersistenceGateway',
]
