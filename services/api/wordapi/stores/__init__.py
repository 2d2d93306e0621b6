"""Data stores for persistence and locking.

Stores handle:
- PostgreSQL: engine lifecycle, sessions, the category repository
- Redis: optional distributed lock for category refreshes

No refresh/generation logic in stores - that belongs in services.
"""
