"""Test fixtures package."""

from .memory_storage import MemoryStorage
from .records import BASE_TIME, ScriptedRandom, make_record, seed_record

__all__ = [
    "BASE_TIME",
    "MemoryStorage",
    "ScriptedRandom",
    "make_record",
    "seed_record",
]
