"""
Data layer for WorkTimer.

Contains the database models and the entry store adapter.
"""

from .database import EntryStore, create_database, open_store

__all__ = ['EntryStore', 'create_database', 'open_store']
