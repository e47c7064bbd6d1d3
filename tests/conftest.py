import pathlib
import site

import pytest
from dbmap.registry import reset_registry

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_default_registry():
    """Start and end each test with an empty default registry."""
    reset_registry()
    yield
    reset_registry()


pytest_plugins = [
    'tests.fixtures.records',
    'tests.fixtures.cursors',
    'tests.fixtures.sqlite',
]
