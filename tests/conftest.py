"""
Shared fixtures for matching tests.
"""
import asyncio

import pytest

from helpers import TEST_FACET_SIZES
from stylematch.db.qdrant import QdrantManager


@pytest.fixture
def qdrant_manager():
    """In-memory Qdrant collection with the test facet layout."""
    manager = QdrantManager(location=":memory:", collection_name="test_service_media")
    asyncio.run(manager.create_collection(vector_sizes=TEST_FACET_SIZES))
    yield manager
    manager.close()
