"""Pytest configuration and fixtures for the test suite."""

import random

import pytest

from sidecards.config import Config
from sidecards.sync.flashcard_store import FlashcardStore
from sidecards.sync.id_allocator import IdentifierAllocator
from sidecards.sync.reference_stripper import ReferenceStripper
from sidecards.sync.token_scanner import TokenScanner
from tests.fixtures import MemoryStorage


@pytest.fixture
def memory_storage():
    """Provide an empty in-memory vault."""
    return MemoryStorage()


@pytest.fixture
def allocator():
    """Provide an allocator with a seeded random source."""
    return IdentifierAllocator(rng=random.Random(1234), max_attempts=8)


@pytest.fixture
def scanner():
    return TokenScanner(cache_size=16, margin=16)


@pytest.fixture
def stripper(memory_storage):
    return ReferenceStripper(memory_storage)


@pytest.fixture
def store(memory_storage, allocator, stripper):
    """Provide a loaded store over the in-memory vault."""
    flashcard_store = FlashcardStore(memory_storage, "~card-data", allocator, stripper)
    flashcard_store.load()
    return flashcard_store


@pytest.fixture
def test_config(tmp_path):
    """Provide a config pointing at an empty vault directory."""
    vault = tmp_path / "vault"
    vault.mkdir()
    return Config(
        vault_path=vault,
        data_dir=tmp_path / "data",
        log_level="INFO",
        refresh_settle_delay=0.0,
    )
