"""
Shared pytest configuration and fixtures for the conflux tests.
"""

import pytest

from conflux.codec import CodecRegistry, get_codec_registry, register_default_codecs
from conflux.context import Context
from conflux.source import MapSource


@pytest.fixture(scope="session", autouse=True)
def default_codecs():
    """
    Register the built-in codecs on the process-wide registry once per session.
    """
    return register_default_codecs()


@pytest.fixture
def codec_registry():
    """A private registry holding the built-in codecs."""
    return register_default_codecs(CodecRegistry())


@pytest.fixture
def ctx():
    return Context()


@pytest.fixture(scope="session")
def base_config_data():
    """
    Layered configuration reused across test modules.
    """
    return {
        'defaults': {
            'server': {'host': 'localhost', 'port': 8080, 'tls': False},
            'database': {'user': 'app', 'pool': 5},
            'features': ['a', 'b'],
        },
        'override': {
            'Server': {'Port': 9090, 'Host': 'x'},
            'database': {'pool': '10'},
        },
    }


@pytest.fixture
def defaults_source(base_config_data):
    return MapSource(base_config_data['defaults'], name="defaults")


@pytest.fixture
def override_source(base_config_data):
    return MapSource(base_config_data['override'], name="override")


@pytest.fixture
def global_registry():
    return get_codec_registry()


# Pytest marks for categorizing tests
pytestmark = pytest.mark.unit
