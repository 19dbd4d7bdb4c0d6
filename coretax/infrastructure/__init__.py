"""Infrastructure layer: persistence and deferred work.

- **database**: Async PostgreSQL access with SQLAlchemy 2.0, the declarative
  models and the generic repository
- **repositories**: Entity repositories with the filtered list queries
- **sync**: Fire-and-forget scheduler for simulated bank synchronization
"""
