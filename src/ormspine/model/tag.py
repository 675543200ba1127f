"""Field tag mini-language: ``<storageName> [key] [auto]``."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from ormspine.errors import SchemaError

ORM_TAG = "orm"

KEY = "key"
AUTO = "auto"


@dataclass(frozen=True)
class Tag:
    """Parsed field tag.

    The first token is the storage name; up to two modifiers follow in
    either order. An empty tag stores the field under its attribute name.
    """

    raw: str
    name: str
    is_primary: bool = False
    is_auto: bool = False

    @classmethod
    def parse(cls, raw: str, default_name: str) -> Tag:
        tokens = raw.split()
        if not tokens:
            return cls(raw=raw, name=default_name)

        modifiers = tokens[1:]
        if len(modifiers) > 2:
            raise SchemaError(f"tag {raw!r} has more than two modifiers")
        for modifier in modifiers:
            if modifier not in (KEY, AUTO):
                raise SchemaError(f"tag {raw!r} has unknown modifier {modifier!r}")
        if len(set(modifiers)) != len(modifiers):
            raise SchemaError(f"tag {raw!r} repeats a modifier")
        if AUTO in modifiers and KEY not in modifiers:
            raise SchemaError(f"tag {raw!r}: auto applies only to the key")

        return cls(
            raw=raw,
            name=tokens[0],
            is_primary=KEY in modifiers,
            is_auto=AUTO in modifiers,
        )

    def __str__(self) -> str:
        return self.raw or self.name


def orm_field(tag: str, **kwargs: Any) -> Any:
    """Declare a dataclass field carrying an ``orm`` tag.

    Accepts the usual ``dataclasses.field`` arguments::

        id: int = orm_field("id key auto", default=0)
        users: list[User] = orm_field("users", default_factory=list)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[ORM_TAG] = tag
    return dataclasses.field(metadata=metadata, **kwargs)


__all__ = ["ORM_TAG", "Tag", "orm_field"]
