import os
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from keycloak_testcontainer.exceptions import ConfigurationException


CONFIG_PATH_ENV_VAR = "KEYCLOAK_TESTCONTAINER_CONFIG"
""" Environment variable with a path to a YAML file, which replaces bundled defaults. """

_default_config_path = Path(__file__).parent / "config.yml"


def normalize_context_path(context_path: str) -> str:
    """ Returns `context_path` without trailing slashes; raises ValueError, if it's not empty and not absolute. """
    if context_path and not context_path.startswith("/"):
        raise ValueError(f"Context path must be empty or start with '/', got '{context_path}'.")
    return context_path.rstrip("/")


class KeycloakContainerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    image: str = Field(min_length=1)
    version: str = Field(min_length=1)

    admin_username: str = Field(min_length=1)
    admin_password: str = Field(min_length=1)
    context_path: str = ""

    startup_timeout: float = Field(gt=0)

    initial_ram_percentage: int = Field(ge=1, le=100)
    max_ram_percentage: int = Field(ge=1, le=100)

    default_provider_classes_location: str = Field(min_length=1)
    resource_root: str = ""

    @field_validator("context_path")
    @classmethod
    def validate_context_path(cls, value: str) -> str:
        return normalize_context_path(value)

    @property
    def image_name(self) -> str:
        return f"{self.image}:{self.version}"

    @property
    def startup_timeout_delta(self) -> timedelta:
        return timedelta(seconds=self.startup_timeout)

    @property
    def resource_root_path(self) -> Path:
        """ Directory, against which relative resource paths are resolved. """
        return Path(self.resource_root) if self.resource_root else Path.cwd()


def load_config(path: str | os.PathLike | None = None) -> KeycloakContainerConfig:
    """
    Loads container defaults from `path`, the file set in `KEYCLOAK_TESTCONTAINER_CONFIG`
    or the bundled `config.yml` (in that order of precedence).
    """
    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV_VAR) or _default_config_path

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationException(f"Failed to read configuration file '{path}'.") from e

    try:
        return KeycloakContainerConfig(**data)
    except ValidationError as e:
        raise ConfigurationException(f"Invalid configuration file '{path}':\n{e}") from e
