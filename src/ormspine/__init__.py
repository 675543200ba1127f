"""
ormspine - a lightweight object-relational mapper core.

Derives a relational schema from dataclass record definitions, runs
create/insert/update/delete/query/drop against it, and resolves relation
fields (one dependent record, or a list of them) through join tables.

Manifesto:
    - **Records are dataclasses:** Tags in field metadata, no base class
    - **Derive once, bind per call:** Schemas are cached per owner
    - **Collaborators by protocol:** Any executor and builder with the right
      shape plugs in
    - **Fail fast:** Typed errors name the failing step

Architecture:
    ::

        types ──▶ model ──▶ marshal ──▶ filter ──▶ orm
                                          │          │
                                builder ◀─┘          ├──▶ executor
                                                     └──▶ provider / factory

Examples:
    >>> from dataclasses import dataclass
    >>> from ormspine import Orm, Provider, SQLiteExecutor, orm_field
    >>> @dataclass
    ... class User:
    ...     id: int = orm_field("id key auto", default=0)
    ...     name: str = orm_field("name", default="")
    >>> orm = Orm(SQLiteExecutor(), Provider("default"))
    >>> orm.create(User)
    >>> orm.insert(User(name="ada")).id
    1

Tags:
    orm, schema, sqlite, sqlalchemy, ormspine

Doc-Types:
    - API Reference
"""

__version__ = "0.1.0"

from ormspine.builder import BuilderRegistry, SQLiteBuilder, builder_registry
from ormspine.errors import (
    ConfigError,
    ConsistencyError,
    ErrorCategory,
    ErrorContext,
    ExecutorError,
    NotFoundError,
    OrmError,
    SchemaError,
    TypeMismatchError,
)
from ormspine.executor import EngineExecutor, SQLiteExecutor, create_orm_engine
from ormspine.factory import OrmFactory
from ormspine.filter import Filter, FilterItem, Operator, PageWindow
from ormspine.model import Info, Item, ObjectValue, Ownership, Tag, derive_info, orm_field
from ormspine.orm import Orm
from ormspine.provider import Provider, ProviderRegistry
from ormspine.settings import OrmSettings, get_settings
from ormspine.types import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    TypeKind,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    "__version__",
    # Schema
    "Info",
    "Item",
    "ObjectValue",
    "Ownership",
    "Tag",
    "TypeKind",
    "derive_info",
    "orm_field",
    # Width markers
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    # Filter
    "Filter",
    "FilterItem",
    "Operator",
    "PageWindow",
    # Orchestration
    "Orm",
    "OrmFactory",
    "Provider",
    "ProviderRegistry",
    # Collaborators
    "BuilderRegistry",
    "EngineExecutor",
    "SQLiteBuilder",
    "SQLiteExecutor",
    "builder_registry",
    "create_orm_engine",
    # Settings
    "OrmSettings",
    "get_settings",
    # Errors
    "ConfigError",
    "ConsistencyError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutorError",
    "NotFoundError",
    "OrmError",
    "SchemaError",
    "TypeMismatchError",
]
