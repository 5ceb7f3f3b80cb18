import logging
from pathlib import Path
import threading
from typing import Annotated

import typer
import yaml

from keycloak_testcontainer.config import load_config
from keycloak_testcontainer.container import KeycloakContainer


app = typer.Typer(pretty_exceptions_enable=False)
""" CLI utility for running a disposable Keycloak container. """


ConfigFileOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML file with container defaults.")
]


def build_container(
    config_file: Path | None = None,
    image: str | None = None,
    admin_username: str | None = None,
    admin_password: str | None = None,
    context_path: str | None = None,
    realm: list[Path] | None = None,
    provider_classes: list[Path] | None = None,
    provider_lib: list[Path] | None = None,
    feature: list[str] | None = None,
    tls: bool = False,
    debug_port: int | None = None,
    verbose: bool = False
) -> KeycloakContainer:
    """ Returns a container configured with `run` command options. """
    container = KeycloakContainer(image, config=load_config(config_file))

    if admin_username is not None:
        container.with_admin_username(admin_username)
    if admin_password is not None:
        container.with_admin_password(admin_password)
    if context_path is not None:
        container.with_context_path(context_path)
    if realm:
        container.with_realm_import_files(*realm)
    if provider_classes:
        container.with_provider_classes_from(*provider_classes)
    if provider_lib:
        container.with_provider_libs_from(provider_lib)
    if feature:
        container.with_features_enabled(*feature)
    if tls:
        container.use_tls()
    if debug_port is not None:
        container.with_debug_fixed_port(debug_port, False)
    if verbose:
        container.with_verbose_output()

    return container


@app.command(help="Starts a Keycloak container and keeps it running until interrupted.")
def run(
    config_file: ConfigFileOption = None,
    image: Annotated[str | None, typer.Option(help="Full image name, e.g. quay.io/keycloak/keycloak:26.0")] = None,
    admin_username: str | None = None,
    admin_password: str | None = None,
    context_path: str | None = None,
    realm: Annotated[list[Path] | None, typer.Option(help="Realm JSON file to import (repeatable).")] = None,
    provider_classes: Annotated[list[Path] | None, typer.Option(help="Folder to deploy as a provider JAR (repeatable).")] = None,
    provider_lib: Annotated[list[Path] | None, typer.Option(help="Provider dependency JAR (repeatable).")] = None,
    feature: Annotated[list[str] | None, typer.Option(help="Feature to enable (repeatable).")] = None,
    tls: bool = False,
    debug_port: int | None = None,
    verbose: bool = False,
    debug: Annotated[bool, typer.Option(help="Print server output.")] = False
):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    container = build_container(
        config_file=config_file,
        image=image,
        admin_username=admin_username,
        admin_password=admin_password,
        context_path=context_path,
        realm=realm,
        provider_classes=provider_classes,
        provider_lib=provider_lib,
        feature=feature,
        tls=tls,
        debug_port=debug_port,
        verbose=verbose
    )

    with container:
        typer.echo(f"Keycloak URL:      {container.get_auth_server_url()}")
        typer.echo(f"Management URL:    {container.get_management_server_url()}")
        typer.echo(f"Admin credentials: {container.get_admin_username()} / {container.get_admin_password()}")
        if debug_port is not None:
            typer.echo(f"Debug port:        {container.get_debug_port()}")
        typer.echo("Press Ctrl+C to stop the container.")

        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            typer.echo("Stopping the container.")


@app.command(help="Prints effective container defaults.")
def show_config(config_file: ConfigFileOption = None):
    config = load_config(config_file)
    typer.echo(yaml.safe_dump(config.model_dump(), sort_keys=False), nl=False)


if __name__ == "__main__":
    app()
