import logging
import os
from datetime import timedelta
import re
import ssl
from pathlib import Path
from typing import Iterable, Iterator, Self

from docker.errors import DockerException
import httpx
from keycloak import KeycloakAdmin
from testcontainers.core.container import DockerContainer
from testcontainers.core.wait_strategies import HttpWaitStrategy, LogMessageWaitStrategy, WaitStrategy

from keycloak_testcontainer.config import KeycloakContainerConfig, load_config, normalize_context_path
from keycloak_testcontainer.exceptions import ConfigurationException, ContainerNotStartedException, \
    InvalidOperationException, TlsConfigurationException
from keycloak_testcontainer.tls import HttpsClientAuth, build_ssl_context, keystore_type, \
    load_certificates, write_ca_bundle
from keycloak_testcontainer.util.archive import build_provider_jar
from keycloak_testcontainer.util.logging import ContainerLogFollower, log, log_container_output
from keycloak_testcontainer.util.staging import StagingDirectory


MASTER_REALM = "master"
ADMIN_CLI_CLIENT = "admin-cli"

KEYCLOAK_PORT_HTTP = 8080
KEYCLOAK_PORT_HTTPS = 8443
KEYCLOAK_PORT_MGMT = 9000
KEYCLOAK_PORT_DEBUG = 8787

KEYCLOAK_HOME_DIR = "/opt/keycloak"
KEYCLOAK_CONF_DIR = f"{KEYCLOAK_HOME_DIR}/conf"
DEFAULT_KEYCLOAK_PROVIDERS_NAME = "providers.jar"
DEFAULT_KEYCLOAK_PROVIDERS_LOCATION = f"{KEYCLOAK_HOME_DIR}/providers"
DEFAULT_REALM_IMPORT_FILES_LOCATION = f"{KEYCLOAK_HOME_DIR}/data/import/"
KEYSTORE_FILE_IN_CONTAINER = f"{KEYCLOAK_CONF_DIR}/server.keystore"
TRUSTSTORE_FILE_IN_CONTAINER = f"{KEYCLOAK_CONF_DIR}/server.truststore"

DEFAULT_TLS_KEYSTORE = Path(__file__).parent / "resources" / "tls.p12"
DEFAULT_TLS_KEYSTORE_PASSWORD = "changeit"

NIGHTLY_TAG = "nightly"
NIGHTLY_VERSION = "999.0.0-SNAPSHOT"
CONTAINER_LOG_NAME = "keycloak"

# Server runs as a non-root user
CONTAINER_FILE_MODE = 0o644

# Keycloak 26 renamed bootstrap admin variables (`KEYCLOAK_ADMIN*` are deprecated)
_BOOTSTRAP_ADMIN_ENV_SINCE_MAJOR = 26

_DEV_MODE_LOG_MESSAGE = re.compile(
    r".*Running the server in development mode\. DO NOT use this configuration in production.*"
)

PathType = str | os.PathLike


def log_wait_strategy() -> LogMessageWaitStrategy:
    """ Returns a strategy, which waits for the development mode banner in container logs. """
    return LogMessageWaitStrategy(_DEV_MODE_LOG_MESSAGE)


def _require(value, name: str) -> None:
    if value is None:
        raise ValueError(f"{name} must not be None")


class KeycloakContainer(DockerContainer):
    """
    Keycloak server container for integration tests.

    Configuration methods can be chained and must be called before the container is started;
    they are translated into the server's environment variables, command line & files copied into the container
    when the container starts.
    """
    def __init__(
        self,
        image: str | None = None,
        config: KeycloakContainerConfig | None = None,
        **kwargs
    ):
        self.config = config if config is not None else load_config()
        """ Container defaults. """
        super().__init__(image or self.config.image_name, **kwargs)
        self.with_exposed_ports(KEYCLOAK_PORT_HTTP, KEYCLOAK_PORT_HTTPS, KEYCLOAK_PORT_MGMT)

        self._admin_username = self.config.admin_username
        self._admin_password = self.config.admin_password
        self._bootstrap_admin_enabled = True
        self._context_path = self.config.context_path
        self._initial_ram_percentage = self.config.initial_ram_percentage
        self._max_ram_percentage = self.config.max_ram_percentage
        self._startup_timeout = self.config.startup_timeout_delta

        self._import_files: dict[Path, None] = {}   # ordered set

        self._tls_certificate_filename: Path | None = None
        self._tls_certificate_key_filename: Path | None = None
        self._tls_keystore_filename: Path | None = None
        self._tls_keystore_password: str | None = None
        self._tls_truststore_filename: Path | None = None
        self._tls_truststore_password: str | None = None
        self._tls_trusted_certificate_filenames: list[Path] = []
        self._use_tls = False
        self._https_client_auth = HttpsClientAuth.NONE

        self._disabled_caching = False
        self._metrics_enabled = False
        self._debug_enabled = False
        self._debug_host_port = 0
        self._debug_suspend = False
        self._use_verbose = False
        self._production_mode = False
        self._optimized = False
        self._features_enabled: list[str] | None = None
        self._features_disabled: list[str] | None = None

        self._custom_wait_strategy_set = False
        self._forward_logs = True

        self._provider_class_locations: list[Path] = []
        self._provider_libs_locations: list[Path] = []
        self._custom_command_parts: list[str] = []

        self._command_parts: list[str] = []
        self._container_files: dict[str, Path | bytes] = {}
        self._staging = StagingDirectory()
        """ Host directory for client-side TLS files. """

    ############ Lifecycle ############
    def _configure(self) -> None:
        command_parts: list[str] = []
        if self._use_verbose:
            command_parts.append("--verbose")
        command_parts.append("start" if self._production_mode else "start-dev")
        if self._optimized:
            command_parts.append("--optimized")

        if self._context_path:
            self.with_env("KC_HTTP_RELATIVE_PATH", self._context_path)

        if self._features_enabled is not None:
            self.with_env("KC_FEATURES", ",".join(self._features_enabled))

        if self._features_disabled is not None:
            self.with_env("KC_FEATURES_DISABLED", ",".join(self._features_disabled))

        if self._bootstrap_admin_enabled:
            if self._uses_bootstrap_admin_env():
                self.with_env("KC_BOOTSTRAP_ADMIN_USERNAME", self._admin_username)
                self.with_env("KC_BOOTSTRAP_ADMIN_PASSWORD", self._admin_password)
            else:
                self.with_env("KEYCLOAK_ADMIN", self._admin_username)
                self.with_env("KEYCLOAK_ADMIN_PASSWORD", self._admin_password)
        self.with_env(
            "JAVA_OPTS_KC_HEAP",
            f"-XX:InitialRAMPercentage={self._initial_ram_percentage} "
            f"-XX:MaxRAMPercentage={self._max_ram_percentage}"
        )

        self._configure_tls()

        self.with_env("KC_METRICS_ENABLED", _bool(self._metrics_enabled))
        self.with_env("KC_HEALTH_ENABLED", _bool(True))
        if not self._custom_wait_strategy_set:
            super().waiting_for(self._default_wait_strategy())

        for index, location in enumerate(self._provider_class_locations):
            self.create_keycloak_extension_deployment(
                DEFAULT_KEYCLOAK_PROVIDERS_LOCATION,
                f"{index}_{DEFAULT_KEYCLOAK_PROVIDERS_NAME}",
                location
            )

        for lib in self._provider_libs_locations:
            self._copy_file_to_container(lib, f"{DEFAULT_KEYCLOAK_PROVIDERS_LOCATION}/{lib.name}")

        command_parts.append("--import-realm")
        for import_file, name in _with_unique_names(self._import_files):
            self._copy_file_to_container(import_file, DEFAULT_REALM_IMPORT_FILES_LOCATION + name)

        # Caching is disabled by default in dev mode, re-enable it unless explicitly disabled
        if not self._disabled_caching:
            self.with_env("KC_SPI_THEME_CACHE_THEMES", _bool(True))
            self.with_env("KC_SPI_THEME_CACHE_TEMPLATES", _bool(True))
            # max-age of the Cache-Control header: 30 days (Keycloak default)
            self.with_env("KC_SPI_THEME_STATIC_MAX_AGE", str(2592000))

        if self._debug_enabled:
            self.with_env("DEBUG", _bool(True))
            self.with_env("DEBUG_PORT", f"*:{KEYCLOAK_PORT_DEBUG}")
            if self._debug_host_port > 0:
                self.with_bind_ports(KEYCLOAK_PORT_DEBUG, self._debug_host_port)
            else:
                self.with_exposed_ports(KEYCLOAK_PORT_DEBUG)
            if self._debug_suspend:
                self.with_env("DEBUG_SUSPEND", "y")

        if self._custom_command_parts:
            log(
                "You are using custom command parts. "
                "Container behavior and configuration may be corrupted. "
                "You are self responsible for proper behavior and functionality!\n"
                f"CustomCommandParts: {self._custom_command_parts}",
                level=logging.WARNING
            )
            command_parts.extend(self._custom_command_parts)

        self._command_parts = command_parts
        super().with_command(command_parts)

    def _configure_tls(self) -> None:
        if self._use_tls and self._tls_certificate_filename is not None:
            tls_cert_file_path = f"{KEYCLOAK_CONF_DIR}/tls.crt"
            tls_cert_key_file_path = f"{KEYCLOAK_CONF_DIR}/tls.key"
            self._copy_file_to_container(self._tls_certificate_filename, tls_cert_file_path)
            self._copy_file_to_container(self._tls_certificate_key_filename, tls_cert_key_file_path)
            self.with_env("KC_HTTPS_CERTIFICATE_FILE", tls_cert_file_path)
            self.with_env("KC_HTTPS_CERTIFICATE_KEY_FILE", tls_cert_key_file_path)
        elif self._use_tls and self._tls_keystore_filename is not None:
            self._copy_file_to_container(self._tls_keystore_filename, KEYSTORE_FILE_IN_CONTAINER)
            self.with_env("KC_HTTPS_KEY_STORE_FILE", KEYSTORE_FILE_IN_CONTAINER)
            self.with_env("KC_HTTPS_KEY_STORE_PASSWORD", self._tls_keystore_password)
            # Type can't be detected from the file name inside the container
            if (store_type := keystore_type(self._tls_keystore_filename)) is not None:
                self.with_env("KC_HTTPS_KEY_STORE_TYPE", store_type)

        if self._use_tls and self._tls_truststore_filename is not None:
            self._copy_file_to_container(self._tls_truststore_filename, TRUSTSTORE_FILE_IN_CONTAINER)
            self.with_env("KC_HTTPS_TRUST_STORE_FILE", TRUSTSTORE_FILE_IN_CONTAINER)
            self.with_env("KC_HTTPS_TRUST_STORE_PASSWORD", self._tls_truststore_password)
            if (store_type := keystore_type(self._tls_truststore_filename)) is not None:
                self.with_env("KC_HTTPS_TRUST_STORE_TYPE", store_type)

        if self._tls_trusted_certificate_filenames:
            truststore_paths = []
            for certificate, name in _with_unique_names(self._tls_trusted_certificate_filenames):
                path_in_container = f"{KEYCLOAK_CONF_DIR}/{name}"
                self._copy_to_container(certificate, path_in_container)
                truststore_paths.append(path_in_container)
            self.with_env("KC_TRUSTSTORE_PATHS", ",".join(truststore_paths))

        self.with_env("KC_HTTPS_CLIENT_AUTH", str(self._https_client_auth))
        self.with_env("KC_HTTPS_MANAGEMENT_CLIENT_AUTH", str(HttpsClientAuth.NONE))

    def _default_wait_strategy(self) -> WaitStrategy:
        strategy = HttpWaitStrategy(port=KEYCLOAK_PORT_MGMT, path=f"{self._context_path}/health/started")
        if self._use_tls:
            strategy = strategy.using_tls(insecure=True)
        return strategy.for_status_code(200).with_startup_timeout(self._startup_timeout)

    def start(self) -> Self:
        try:
            super().start()
        except Exception:
            self._log_startup_failure()
            raise

        if self._forward_logs:
            ContainerLogFollower(
                CONTAINER_LOG_NAME,
                self.get_wrapped_container().logs(stream=True, follow=True)
            ).start()
        log(f"Keycloak started at {self.get_auth_server_url()}.")
        return self

    def stop(self, force: bool = True, delete_volume: bool = True) -> None:
        try:
            super().stop(force=force, delete_volume=delete_volume)
        finally:
            self._staging.cleanup()

    def _log_startup_failure(self) -> None:
        container = self.get_wrapped_container()
        if container is None:
            return
        try:
            log_container_output(CONTAINER_LOG_NAME, container.logs())
        except DockerException as e:
            log(e, level=logging.WARNING)

    ############ Command & wait strategy ############
    def with_command(self, command) -> Self:
        raise InvalidOperationException(
            "You are trying to set custom container commands, which is not supported by this container. "
            "Try using the with_custom_command() method."
        )

    def with_custom_command(self, cmd: str) -> Self:
        """ Appends `cmd` to the server command line. """
        self._custom_command_parts.append(cmd)
        return self

    def waiting_for(self, strategy: WaitStrategy) -> Self:
        """ Replaces the default `/health/started` wait strategy with `strategy`. """
        self._custom_wait_strategy_set = True
        return super().waiting_for(strategy)

    def with_startup_timeout(self, startup_timeout: float | timedelta) -> Self:
        """ Sets timeout of the default wait strategy (in seconds, if a number is passed). """
        if not isinstance(startup_timeout, timedelta):
            startup_timeout = timedelta(seconds=startup_timeout)
        self._startup_timeout = startup_timeout
        return self

    def with_log_forwarding(self, enabled: bool = True) -> Self:
        """ Enables or disables forwarding of server output to the `keycloak_testcontainer.container` logger. """
        self._forward_logs = enabled
        return self

    ############ Extensions ############
    def create_keycloak_extension_provider(self, extension_class_folder: PathType) -> None:
        """ Maps `extension_class_folder` as an exploded providers.jar to the Keycloak providers folder. """
        self.create_keycloak_extension_deployment(
            DEFAULT_KEYCLOAK_PROVIDERS_LOCATION, DEFAULT_KEYCLOAK_PROVIDERS_NAME, extension_class_folder
        )

    def create_keycloak_extension_deployment(
        self,
        deployment_location: str,
        extension_name: str,
        extension_class_folder: PathType
    ) -> None:
        """
        Packs `extension_class_folder` into a JAR and maps it to `deployment_location`/`extension_name`.
        Folders, which don't exist, are skipped.
        """
        _require(deployment_location, "deployment_location")
        _require(extension_name, "extension_name")
        _require(extension_class_folder, "extension_class_folder")

        classes_location = self.resolve_extension_class_location(extension_class_folder)
        if not classes_location.exists():
            log(f"Extension folder '{classes_location}' does not exist and won't be deployed.", level=logging.WARNING)
            return

        self._transfer(build_provider_jar(classes_location), f"{deployment_location}/{extension_name}")

    def resolve_extension_class_location(self, extension_class_folder: PathType) -> Path:
        return self._resolve(extension_class_folder)

    def with_provider_classes_from(self, *classes_locations: PathType) -> Self:
        """ Deploys each of `classes_locations` as an exploded providers.jar. """
        self._provider_class_locations = [Path(location) for location in classes_locations]
        return self

    def with_default_provider_classes(self) -> Self:
        return self.with_provider_classes_from(self.config.default_provider_classes_location)

    def with_provider_libs_from(self, libs: Iterable[PathType]) -> Self:
        """ Deploys provider dependencies (JAR files) as is. """
        self._provider_libs_locations = [self._resolve(lib) for lib in libs]
        return self

    ############ Realms & admin ############
    def with_realm_import_file(self, import_file: PathType) -> Self:
        self._import_files[self._resolve(import_file)] = None
        return self

    def with_realm_import_files(self, *files: PathType) -> Self:
        for file in files:
            self.with_realm_import_file(file)
        return self

    def with_admin_username(self, admin_username: str) -> Self:
        self._admin_username = admin_username
        return self

    def with_admin_password(self, admin_password: str) -> Self:
        self._admin_password = admin_password
        return self

    def with_bootstrap_admin_disabled(self) -> Self:
        """ Don't create a bootstrap admin user (e.g. when it's imported with the master realm). """
        self._bootstrap_admin_enabled = False
        return self

    def with_context_path(self, context_path: str) -> Self:
        self._context_path = normalize_context_path(context_path)
        return self

    ############ Runtime ############
    def with_ram_percentage(self, initial_ram_percentage: int, max_ram_percentage: int) -> Self:
        self._initial_ram_percentage = initial_ram_percentage
        self._max_ram_percentage = max_ram_percentage
        return self

    def with_verbose_output(self) -> Self:
        self._use_verbose = True
        return self

    def with_production_mode(self) -> Self:
        """ Run the server with `start` instead of `start-dev`. """
        self._production_mode = True
        return self

    def with_optimized_flag(self) -> Self:
        """ Pass `--optimized` to use a pre-built server image. """
        self._optimized = True
        return self

    def with_nightly(self) -> Self:
        """ Use the nightly build of the configured image. """
        self.image = f"{self.config.image}:{NIGHTLY_TAG}"
        return self

    def with_features_enabled(self, *features: str) -> Self:
        self._features_enabled = list(features)
        return self

    def with_features_disabled(self, *features: str) -> Self:
        self._features_disabled = list(features)
        return self

    def with_disabled_caching(self) -> Self:
        self._disabled_caching = True
        return self

    def with_enabled_metrics(self) -> Self:
        self._metrics_enabled = True
        return self

    def with_debug(self) -> Self:
        """ Enable remote debugging and expose it on a random port. """
        return self.with_debug_fixed_port(0, False)

    def with_debug_fixed_port(self, host_port: int, suspend: bool) -> Self:
        """
        Enable remote debugging and expose it on `host_port` of the host machine.
        If `suspend` is True, the server waits until a debugger is attached.
        """
        self._debug_enabled = True
        self._debug_host_port = host_port
        self._debug_suspend = suspend
        return self

    ############ TLS ############
    def use_tls(self, tls_certificate_filename: PathType | None = None, tls_certificate_key_filename: PathType | None = None) -> Self:
        """
        Enables HTTPS with a PEM certificate & key pair.
        Without arguments, the keystore bundled with this package is used.
        """
        if tls_certificate_filename is None and tls_certificate_key_filename is None:
            return self.use_tls_keystore(DEFAULT_TLS_KEYSTORE, DEFAULT_TLS_KEYSTORE_PASSWORD)

        _require(tls_certificate_filename, "tls_certificate_filename")
        _require(tls_certificate_key_filename, "tls_certificate_key_filename")
        self._tls_certificate_filename = self._resolve(tls_certificate_filename)
        self._tls_certificate_key_filename = self._resolve(tls_certificate_key_filename)
        self._use_tls = True
        return self

    def use_tls_keystore(self, tls_keystore_filename: PathType, tls_keystore_password: str) -> Self:
        _require(tls_keystore_filename, "tls_keystore_filename")
        _require(tls_keystore_password, "tls_keystore_password")
        self._tls_keystore_filename = self._resolve(tls_keystore_filename)
        self._tls_keystore_password = tls_keystore_password
        self._use_tls = True
        return self

    def use_mutual_tls(
        self,
        tls_truststore_filename: PathType,
        tls_truststore_password: str,
        https_client_auth: HttpsClientAuth
    ) -> Self:
        """
        Deprecated, use `with_trusted_certificates()` and `with_https_client_auth()` instead.
        """
        _require(tls_truststore_filename, "tls_truststore_filename")
        _require(tls_truststore_password, "tls_truststore_password")
        _require(https_client_auth, "https_client_auth")
        log("use_mutual_tls() is deprecated, use with_trusted_certificates() & with_https_client_auth().", level=logging.WARNING)
        self._tls_truststore_filename = self._resolve(tls_truststore_filename)
        self._tls_truststore_password = tls_truststore_password
        self._https_client_auth = https_client_auth
        self._use_tls = True
        return self

    def with_trusted_certificates(self, tls_trusted_certificate_filenames: Iterable[PathType]) -> Self:
        """
        Configures the server truststore with PKCS#12 or PEM files
        (or directories with those files, which are copied recursively).
        """
        _require(tls_trusted_certificate_filenames, "tls_trusted_certificate_filenames")
        self._tls_trusted_certificate_filenames = [self._resolve(f) for f in tls_trusted_certificate_filenames]
        return self

    def with_https_client_auth(self, https_client_auth: HttpsClientAuth) -> Self:
        """ Configures the server to request or require client certificates. """
        _require(https_client_auth, "https_client_auth")
        self._https_client_auth = https_client_auth
        self._use_tls = True
        return self

    ############ Accessors ############
    def get_admin_client(self) -> KeycloakAdmin:
        """ Returns an admin API client, authenticated as the admin user in the master realm. """
        verify: bool | str = True
        if self._use_tls:
            verify = str(write_ca_bundle(self._server_certificates(), self._staging.path))
        return KeycloakAdmin(
            server_url=f"{self.get_auth_server_url()}/",
            username=self.get_admin_username(),
            password=self.get_admin_password(),
            realm_name=MASTER_REALM,
            client_id=ADMIN_CLI_CLIENT,
            verify=verify
        )

    def get_ssl_context(self) -> ssl.SSLContext | None:
        """ Returns an SSL context trusting the server certificate or None, if TLS is disabled. """
        return build_ssl_context(self._server_certificates()) if self._use_tls else None

    def get_http_client(self, **kwargs) -> httpx.Client:
        """
        Returns an HTTP client, which trusts the server certificate.
        Base URL defaults to the auth server URL; `kwargs` are passed to `httpx.Client`.
        """
        kwargs.setdefault("base_url", self.get_auth_server_url())
        kwargs.setdefault("verify", self.get_ssl_context() or True)
        return httpx.Client(**kwargs)

    def get_protocol(self) -> str:
        return "https" if self._use_tls else "http"

    def get_auth_server_url(self) -> str:
        port = self.get_https_port() if self._use_tls else self.get_http_port()
        return f"{self.get_protocol()}://{self.get_container_host_ip()}:{port}{self.get_context_path()}"

    def get_management_server_url(self) -> str:
        return f"{self.get_protocol()}://{self.get_container_host_ip()}:{self.get_http_management_port()}{self.get_context_path()}"

    def get_admin_username(self) -> str:
        return self._admin_username

    def get_admin_password(self) -> str:
        return self._admin_password

    def get_http_port(self) -> int:
        return self._get_mapped_port(KEYCLOAK_PORT_HTTP)

    def get_https_port(self) -> int:
        return self._get_mapped_port(KEYCLOAK_PORT_HTTPS)

    def get_http_management_port(self) -> int:
        return self._get_mapped_port(KEYCLOAK_PORT_MGMT)

    def get_debug_port(self) -> int:
        """ Returns mapped remote debugging port or -1, if debugging is not enabled. """
        return self._get_mapped_port(KEYCLOAK_PORT_DEBUG) if self._debug_enabled else -1

    def get_context_path(self) -> str:
        return self._context_path

    def get_startup_timeout(self) -> timedelta:
        return self._startup_timeout

    def get_keycloak_default_version(self) -> str:
        """ Returns Keycloak version of the container image tag. """
        tag = self._image_tag() or self.config.version
        return NIGHTLY_VERSION if tag == NIGHTLY_TAG else tag

    def get_command(self) -> list[str]:
        """ Returns server command line parts (available after the container is configured). """
        return list(self._command_parts)

    def get_container_files(self) -> dict[str, Path | bytes]:
        """ Returns a mapping of container paths to host files (or generated contents) copied into them. """
        return dict(self._container_files)

    ############ Helpers ############
    def _get_mapped_port(self, port: int) -> int:
        if self.get_wrapped_container() is None:
            raise ContainerNotStartedException(f"Port {port} is mapped only after the container is started.")
        return int(self.get_exposed_port(port))

    def _server_certificates(self):
        if self._tls_certificate_filename is not None:
            return load_certificates(self._tls_certificate_filename)
        if self._tls_keystore_filename is not None:
            return load_certificates(self._tls_keystore_filename, self._tls_keystore_password)
        raise TlsConfigurationException(
            "HTTPS is enabled without a server certificate or keystore, so the server uses a generated "
            "self-signed certificate, which can't be trusted by clients. "
            "Configure server certificates with use_tls() or use_tls_keystore()."
        )

    def _resolve(self, path: PathType) -> Path:
        """ Resolves relative `path` against the configured resource root. """
        path = Path(path)
        return path if path.is_absolute() else self.config.resource_root_path / path

    def _copy_to_container(self, source: Path, container_path: str) -> None:
        """ Copies file `source` to `container_path` or, if `source` is a directory, its files under `container_path`. """
        if not source.is_dir():
            self._copy_file_to_container(source, container_path)
            return

        for file in sorted(p for p in source.rglob("*") if p.is_file()):
            self._copy_file_to_container(file, f"{container_path}/{file.relative_to(source).as_posix()}")

    def _copy_file_to_container(self, source: Path, container_path: str) -> None:
        if not source.is_file():
            raise ConfigurationException(f"File '{source}' does not exist.")
        self._transfer(source, container_path)

    def _transfer(self, content: Path | bytes, container_path: str) -> None:
        """ Copies `content` into the container, when it's created. """
        self._container_files[container_path] = content
        self.with_copy_into_container(content, container_path, mode=CONTAINER_FILE_MODE)

    def _image_tag(self) -> str | None:
        name = self.image.split("@", 1)[0]
        repository, _, tag = name.rpartition(":")
        if not repository or "/" in tag:
            return None
        return tag

    def _uses_bootstrap_admin_env(self) -> bool:
        tag = self._image_tag()
        match = re.match(r"(\d+)(?:\.|$)", tag or "")
        if match is None:
            return True     # nightly, latest & custom tags
        return int(match.group(1)) >= _BOOTSTRAP_ADMIN_ENV_SINCE_MAJOR


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _with_unique_names(paths: Iterable[Path]) -> Iterator[tuple[Path, str]]:
    """ Yields paths with their file names; repeated names are prefixed with the path position. """
    used_names: set[str] = set()
    for index, path in enumerate(paths):
        name = path.name if path.name not in used_names else f"{index}_{path.name}"
        used_names.add(name)
        yield path, name
