"""
CRUD orchestration over derived schemas.

The orchestrator sequences every statement a record and its relation
fields need, asks the builder for the text and the executor for the
effect. It never renders SQL or touches a driver itself.

Manifesto:
    - **Primary first:** The primary row is written before any join row
      so auto-assigned keys exist when relations reference them
    - **Explicit ownership:** OWNED relations create, insert and delete
      their dependents; REFERENCED relations only manage join rows
    - **Fail fast:** The first failing step aborts the operation; the error
      names the operation, the record and the relation field
    - **No hidden transactions:** Atomicity comes from ``Orm.transaction()``

Architecture:
    ::

        Orm.insert(group)
          │
          ├── insert_record(Group)          INSERT INTO `Group` ...
          │     └── key written back to group.id
          └── for each relation item
                ├── OWNED:  insert_record(User)   INSERT INTO `User` ...
                └── insert join row               INSERT INTO `GroupUsers2User` ...

        Operation modules:
        ┌──────────────┬────────────────────────────────────────────┐
        │ create.py    │ primary, owned dependents, join tables      │
        │ drop.py      │ mirror of create                            │
        │ insert.py    │ primary row, dependents, join rows          │
        │ update.py    │ scalar columns, relation replacement        │
        │ delete.py    │ exactly one primary row, join rows          │
        │ query.py     │ columns by key, relations recursively       │
        │ batch.py     │ filtered batch query and count              │
        └──────────────┴────────────────────────────────────────────┘

Examples:
    >>> orm = Orm(SQLiteExecutor(), Provider("default"))
    >>> orm.create(Group)
    >>> group = orm.insert(Group(name="admins", users=[User(name="ada")]))
    >>> orm.query(Group(id=group.id)).users[0].name
    'ada'

Guardrails:
    ❌ DON'T: Expect batch_query to load relation fields
    ✅ DO: Call query() per record when relations are needed

    ❌ DON'T: Rely on owned dependent keys staying stable across update()
    ✅ DO: Re-read dependents after an update

Tags:
    orm, crud, relations, join-table, ormspine

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from ormspine.orm.base import Runner
from ormspine.orm.mapper import Orm

__all__ = ["Orm", "Runner"]
