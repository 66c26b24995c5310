"""
Store adapters package.
"""

from .base import AttendanceStore
from .memory import MemoryStore
from .supabase import SupabaseStore

__all__ = [
    'AttendanceStore',
    'MemoryStore',
    'SupabaseStore',
]
