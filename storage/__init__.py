"""
Storage Module for the Design Critique Assistant

Provides history store implementations for progress entries.
"""

from .history_store import InMemoryHistoryStore, SqlHistoryStore, ProgressRecord

__all__ = ['InMemoryHistoryStore', 'SqlHistoryStore', 'ProgressRecord']
