"""Record types shared by the test suite."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ormspine import Float32, Int8, Int64, UInt8, orm_field


@dataclass
class User:
    id: int = orm_field("id key auto", default=0)
    name: str = orm_field("name", default="")
    email: str = orm_field("email", default="")
    age: int = orm_field("age", default=0)
    active: bool = orm_field("active", default=True)
    score: float = orm_field("score", default=0.0)
    created: datetime = orm_field("created", default=datetime(2024, 1, 1))
    nickname: Optional[str] = orm_field("nickname", default=None)
    tags: list[str] = orm_field("tags", default_factory=list)


@dataclass
class Profile:
    id: int = orm_field("id key auto", default=0)
    bio: str = orm_field("bio", default="")


@dataclass
class Group:
    id: int = orm_field("id key auto", default=0)
    name: str = orm_field("name", default="")
    users: list[User] = orm_field("users", default_factory=list)
    profile: Profile = orm_field("profile", default_factory=Profile)
    admin: Optional[User] = orm_field("admin", default=None)


@dataclass
class Team:
    id: int = orm_field("id key auto", default=0)
    title: str = orm_field("title", default="")
    members: list[Optional[User]] = orm_field("members", default_factory=list)


@dataclass
class Country:
    code: str = orm_field("code key")
    label: str = orm_field("label", default="")


@dataclass
class Reading:
    id: int = orm_field("id key auto", default=0)
    level: Int8 = orm_field("level", default=Int8(0))
    flags: UInt8 = orm_field("flags", default=UInt8(0))
    ratio: Float32 = orm_field("ratio", default=Float32(0.0))
    total: Int64 = orm_field("total", default=Int64(0))


@dataclass
class Untagged:
    key: int = orm_field("key key")
    note: str = ""
    weight: float = 0.0


@dataclass
class Leaf:
    id: int = orm_field("id key auto", default=0)
    label: str = orm_field("label", default="")


@dataclass
class Branch:
    id: int = orm_field("id key auto", default=0)
    leaves: list[Leaf] = orm_field("leaves", default_factory=list)


@dataclass
class Tree:
    id: int = orm_field("id key auto", default=0)
    branches: list[Branch] = orm_field("branches", default_factory=list)
