"""Schema model: derived record descriptions and their value slots."""

from ormspine.model.info import Info, derive_info
from ormspine.model.item import Item, Ownership, parse_datetime
from ormspine.model.tag import ORM_TAG, Tag, orm_field
from ormspine.model.value import ObjectValue

__all__ = [
    "Info",
    "Item",
    "ObjectValue",
    "ORM_TAG",
    "Ownership",
    "Tag",
    "derive_info",
    "orm_field",
    "parse_datetime",
]
