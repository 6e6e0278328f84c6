"""Pytest configuration and shared fixtures."""
import pytest

from formstate import FormSession, ItemStore
import formstate.config as config_module


@pytest.fixture(autouse=True)
def restore_form_config():
    """Restore process-wide defaults after each test."""
    original = config_module._form_config

    yield

    config_module._form_config = original


@pytest.fixture
def item():
    """Provide a nested item with sibling subtrees."""
    return {
        'user': {
            'name': 'Grace',
            'email': 'grace@example.com',
            'tags': ['admin'],
        },
        'flag': False,
    }


@pytest.fixture
def store(item):
    """Provide a store bound to the item fixture."""
    return ItemStore(item)


@pytest.fixture
def session():
    """Provide a session over an empty item."""
    form = FormSession()
    yield form
    form.close()
