from unittest.mock import MagicMock

import pytest

from keycloak_testcontainer.config import KeycloakContainerConfig
from keycloak_testcontainer.container import KeycloakContainer


MAPPED_PORTS = {8080: 32080, 8443: 32443, 9000: 32900, 8787: 32787}


@pytest.fixture(autouse=True)
def no_docker(monkeypatch):
    """
    Replaces Docker client of testcontainers with a mock,
    so that containers can be created & configured without a Docker daemon.
    """
    monkeypatch.setattr("testcontainers.core.container.DockerClient", MagicMock, raising=False)


@pytest.fixture
def container(config: KeycloakContainerConfig):
    """ Yields a container, which is not started, and removes its client-side TLS files afterwards. """
    container = KeycloakContainer(config=config)
    yield container
    container._staging.cleanup()


@pytest.fixture
def started_container(container: KeycloakContainer, monkeypatch):
    """ Container with mocked runtime state of a started container. """
    monkeypatch.setattr(container, "get_wrapped_container", lambda: MagicMock())
    monkeypatch.setattr(container, "get_container_host_ip", lambda: "localhost")
    monkeypatch.setattr(container, "get_exposed_port", lambda port: MAPPED_PORTS[port])
    return container
