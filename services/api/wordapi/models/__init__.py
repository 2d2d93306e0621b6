"""SQLAlchemy ORM models.

Models represent database tables:
- word_categories: generated and user-submitted word categories
"""

from wordapi.models.category import CategoryDraft, CategoryRecord, WordCategory

__all__ = ["CategoryDraft", "CategoryRecord", "WordCategory"]
