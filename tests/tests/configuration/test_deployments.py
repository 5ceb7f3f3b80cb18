"""
Realm import & provider deployment tests.
"""
if __name__ == "__main__":
    import os, sys
    sys.path.insert(0, os.path.abspath(os.path.join(__file__, "../" * 4)))
    from tests.util import run_pytest_tests

import io
import json
import logging
from pathlib import Path
import zipfile

import pytest

from keycloak_testcontainer.config import KeycloakContainerConfig
from keycloak_testcontainer.container import KeycloakContainer
from keycloak_testcontainer.exceptions import ConfigurationException
from tests.data_generators import DataGenerator


############ Realm import ############
def test_realm_import_files(container: KeycloakContainer, tmp_path: Path, data_generator: DataGenerator):
    first = data_generator.realms.write(tmp_path, "test-realm.json", realm="test")
    second = data_generator.realms.write(tmp_path, "another-realm.json", realm="another")

    container.with_realm_import_files(first, second)._configure()

    files = container.get_container_files()
    assert json.loads(files["/opt/keycloak/data/import/test-realm.json"].read_text())["realm"] == "test"
    assert json.loads(files["/opt/keycloak/data/import/another-realm.json"].read_text())["realm"] == "another"
    assert "--import-realm" in container.get_command()


def test_realm_import_files_with_same_names(container: KeycloakContainer, tmp_path: Path, data_generator: DataGenerator):
    first = data_generator.realms.write(tmp_path / "first", realm="first")
    second = data_generator.realms.write(tmp_path / "second", realm="second")

    container.with_realm_import_file(first).with_realm_import_file(second)._configure()

    files = container.get_container_files()
    assert json.loads(files["/opt/keycloak/data/import/test-realm.json"].read_text())["realm"] == "first"
    assert json.loads(files["/opt/keycloak/data/import/1_test-realm.json"].read_text())["realm"] == "second"


def test_same_realm_import_file_is_added_once(container: KeycloakContainer, tmp_path: Path, data_generator: DataGenerator):
    realm_file = data_generator.realms.write(tmp_path)
    container.with_realm_import_file(realm_file).with_realm_import_files(realm_file, realm_file)._configure()

    import_files = [p for p in container.get_container_files() if p.startswith("/opt/keycloak/data/import/")]
    assert import_files == ["/opt/keycloak/data/import/test-realm.json"]


def test_missing_realm_import_file(container: KeycloakContainer, tmp_path: Path):
    container.with_realm_import_file(tmp_path / "missing-realm.json")
    with pytest.raises(ConfigurationException, match="missing-realm.json"):
        container._configure()


def test_relative_realm_import_file(tmp_path: Path, config: KeycloakContainerConfig, data_generator: DataGenerator):
    data_generator.realms.write(tmp_path / "realms")
    config = KeycloakContainerConfig.model_validate({**config.model_dump(), "resource_root": str(tmp_path)})

    container = KeycloakContainer(config=config)
    container.with_realm_import_file("realms/test-realm.json")._configure()
    assert container.get_container_files()["/opt/keycloak/data/import/test-realm.json"] \
        == tmp_path / "realms" / "test-realm.json"


############ Providers ############
def test_provider_classes(container: KeycloakContainer, tmp_path: Path, data_generator: DataGenerator):
    first = data_generator.providers.theme_provider(tmp_path / "first", "first-theme")
    second = data_generator.providers.theme_provider(tmp_path / "second", "second-theme")

    container.with_provider_classes_from(first, second)._configure()

    files = container.get_container_files()
    with zipfile.ZipFile(io.BytesIO(files["/opt/keycloak/providers/0_providers.jar"])) as jar:
        assert "theme/first-theme/login/theme.properties" in jar.namelist()
    with zipfile.ZipFile(io.BytesIO(files["/opt/keycloak/providers/1_providers.jar"])) as jar:
        assert "theme/second-theme/login/theme.properties" in jar.namelist()


def test_missing_provider_classes_folder(
    container: KeycloakContainer,
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture
):
    container.with_provider_classes_from(tmp_path / "does_not_exist")

    with caplog.at_level(logging.WARNING, logger="keycloak_testcontainer"):
        container._configure()

    assert not any(p.startswith("/opt/keycloak/providers/") for p in container.get_container_files())
    assert "does_not_exist" in caplog.text


def test_default_provider_classes(container: KeycloakContainer, config: KeycloakContainerConfig):
    container.with_default_provider_classes()
    assert container.resolve_extension_class_location(config.default_provider_classes_location) \
        == Path(config.resource_root) / "target" / "classes"


def test_create_keycloak_extension_provider(container: KeycloakContainer, tmp_path: Path, data_generator: DataGenerator):
    provider_dir = data_generator.providers.theme_provider(tmp_path / "provider")
    container.create_keycloak_extension_provider(provider_dir)
    assert "/opt/keycloak/providers/providers.jar" in container.get_container_files()


def test_create_keycloak_extension_deployment_requires_arguments(container: KeycloakContainer):
    with pytest.raises(ValueError, match="deployment_location"):
        container.create_keycloak_extension_deployment(None, "ext.jar", "classes")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="extension_name"):
        container.create_keycloak_extension_deployment("/opt/keycloak/providers", None, "classes")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="extension_class_folder"):
        container.create_keycloak_extension_deployment("/opt/keycloak/providers", "ext.jar", None)  # type: ignore[arg-type]


def test_resolve_extension_class_location(container: KeycloakContainer, config: KeycloakContainerConfig):
    for location in ("target/classes", "target/test-classes", "build/classes/java/main", "build/classes/java/test"):
        assert container.resolve_extension_class_location(location) == Path(config.resource_root) / location

    assert container.resolve_extension_class_location("/absolute/classes") == Path("/absolute/classes")


def test_provider_libs(container: KeycloakContainer, tmp_path: Path, data_generator: DataGenerator):
    lib = data_generator.providers.provider_lib(tmp_path / "libs" / "datafaker-2.4.2.jar")
    container.with_provider_libs_from([lib])._configure()

    files = container.get_container_files()
    assert files["/opt/keycloak/providers/datafaker-2.4.2.jar"].read_bytes() == lib.read_bytes()


if __name__ == "__main__":
    run_pytest_tests(__file__) # type: ignore[reportPossiblyUnboundVariable]
