"""
GreenLog Backend — Application Package Initializer
====================================================

What: The `greenlog` package: a FastAPI service over a small garden-tracking
      schema (users, tasks, plants, soils, garden logs).
Who:  Imported by uvicorn (`greenlog.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │        Services (Data Operations)   │  ← SQLAlchemy Core statements
    ├─────────────────────────────────────┤
    │    Models (Core) & Schemas (API)    │  ← table definitions + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Connection Pool)      │  ← managed async connections
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
