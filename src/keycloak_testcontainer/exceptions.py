class KeycloakContainerException(Exception):
    pass


class InvalidOperationException(KeycloakContainerException):
    pass


class ConfigurationException(KeycloakContainerException):
    pass


class TlsConfigurationException(KeycloakContainerException):
    pass


class ExtensionDeploymentException(KeycloakContainerException):
    pass


class ContainerNotStartedException(KeycloakContainerException):
    pass
