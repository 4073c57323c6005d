"""
Storage abstraction layer.
Provides a clean interface for data persistence that can be swapped out.
"""
from .interface import TaskStorage
from .sqlite_storage import SQLiteTaskStorage

__all__ = ['TaskStorage', 'SQLiteTaskStorage']
