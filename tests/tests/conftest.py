import os
import sys
from pathlib import Path

import pytest

project_root_dir = os.path.abspath(os.path.join(__file__, "../" * 3))
sys.path.insert(0, project_root_dir)
sys.path.insert(0, os.path.join(project_root_dir, "src"))

from keycloak_testcontainer.config import KeycloakContainerConfig, load_config

from tests.data_generators import DataGenerator


_resources_dir = Path(project_root_dir) / "tests" / "resources"


############ Session-scoped fixtures ############
@pytest.fixture(scope="session")
def resources_dir() -> Path:
    """ Directory with TLS certificates & keystores used in tests. """
    return _resources_dir


@pytest.fixture(scope="session")
def config() -> KeycloakContainerConfig:
    """ Bundled defaults with resource paths resolved against the test resources directory. """
    config = load_config()
    config.resource_root = str(_resources_dir)
    return config


############ Test-scoped fixtures (common) ############
@pytest.fixture
def data_generator():
    return DataGenerator()
