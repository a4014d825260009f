from relief_sources.store.base import ResourceStore
from relief_sources.store.database import SQLAlchemyResourceStore
from relief_sources.store.engine import create_engine, create_session_maker, init_schema
from relief_sources.store.memory import MemoryResourceStore
from relief_sources.store.tables import Base, ResourceTable

__all__ = [
    "Base",
    "MemoryResourceStore",
    "ResourceStore",
    "ResourceTable",
    "SQLAlchemyResourceStore",
    "create_engine",
    "create_session_maker",
    "init_schema",
]
