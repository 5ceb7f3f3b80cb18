import pytest

from keycloak_testcontainer.config import KeycloakContainerConfig
from keycloak_testcontainer.container import KeycloakContainer

from tests.util import is_docker_available


@pytest.fixture(scope="session", autouse=True)
def docker_daemon():
    """ Skips container tests if Docker daemon is not available. """
    if not is_docker_available():
        pytest.skip("Docker daemon is not available.")


@pytest.fixture(scope="module")
def keycloak(config: KeycloakContainerConfig):
    """ Keycloak container with default settings, shared by tests of a module. """
    with KeycloakContainer(config=config) as container:
        yield container
