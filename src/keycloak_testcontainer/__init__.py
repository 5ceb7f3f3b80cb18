from .config import KeycloakContainerConfig, load_config
from .container import KeycloakContainer, log_wait_strategy, MASTER_REALM, ADMIN_CLI_CLIENT
from .exceptions import KeycloakContainerException, InvalidOperationException, ConfigurationException, \
    TlsConfigurationException, ExtensionDeploymentException, ContainerNotStartedException
from .tls import HttpsClientAuth


__all__ = [
    "KeycloakContainer",
    "KeycloakContainerConfig",
    "HttpsClientAuth",
    "load_config",
    "log_wait_strategy",
    "MASTER_REALM",
    "ADMIN_CLI_CLIENT",
    "KeycloakContainerException",
    "InvalidOperationException",
    "ConfigurationException",
    "TlsConfigurationException",
    "ExtensionDeploymentException",
    "ContainerNotStartedException",
]
