"""
Courseware — Course Domain Services
====================================
Announcements, manual experience points, staff-led discussion groups and a
folder/file tree of course materials, as request-scoped services over a
relational store and a blob store.

Package layout::

    courseware/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Validation messages, upload limits
    ├── schemas.py         # Pydantic input models + changeset helper
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # All ORM models (5 tables)
    ├── engine/
    │   └── policy.py      # Role-based authorization predicates
    └── services/
        ├── results.py              # Result / Failure outcome types
        ├── announcement_service.py # Announcement CRUD
        ├── points_service.py       # Manual XP grant / revoke
        ├── group_service.py        # Leader ↔ student assignment
        ├── material_service.py     # Folder/file tree, cascading delete
        └── storage_service.py      # Local-disk blob store
"""

__version__ = "0.1.0"
