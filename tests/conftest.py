"""Shared fixtures"""

import pytest

from nestview.core import ItemCatalog, TreeContext


@pytest.fixture
def catalog() -> ItemCatalog:
    return ItemCatalog()


@pytest.fixture
def context(catalog) -> TreeContext:
    return TreeContext(catalog)
