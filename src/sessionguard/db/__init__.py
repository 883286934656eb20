"""
sessionguard.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for users,
  role holders (admins, accounts) and sessions.
"""

# Package marker.
