"""Command-line interface for the OAuth2 grant engine.

Each command runs one operation against the configured clients and
token store, the way a single inbound request would.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass

import typer

from oauth2_grants import __version__
from oauth2_grants.client_service import Oauth2ClientService
from oauth2_grants.clients import ClientRegistry
from oauth2_grants.config import ConfigError, Settings, load_config
from oauth2_grants.exceptions import AuthorizationRequired, Oauth2ClientError
from oauth2_grants.grant import AuthorizationCodeGrantService
from oauth2_grants.logging_config import get_logger, setup_logging
from oauth2_grants.oauth.token_store import StateStore, create_state_store
from oauth2_grants.redirect import StaticRequestContext

app = typer.Typer(
    name="oauth2-grants",
    help="Obtain, inspect and clear OAuth2 access tokens for configured clients",
    add_completion=False,
)

logger = get_logger(__name__)

# Exit code when the user agent must visit the authorization URL
EXIT_AUTHORIZATION_REQUIRED = 2


@dataclass
class Runtime:
    """Everything a command needs, built from settings."""

    settings: Settings
    clients: ClientRegistry
    store: StateStore
    request_context: StaticRequestContext


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"oauth2-grants version {__version__}")
        typer.echo(f"Python {sys.version}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """OAuth2 grants CLI."""


ConfigOption = typer.Option(None, "--config", "-c", help="Path to settings file (JSON or YAML)")
ClientsOption = typer.Option(None, "--clients", help="Path to client definitions file")
LogLevelOption = typer.Option(None, "--log-level", "-l", help="Log level override")
RedirectOption = typer.Option(
    None, "--redirect-uri", "-r", help="Absolute callback URL sent to the server"
)


def _runtime(
    config_path: str | None,
    clients_file: str | None,
    log_level: str | None,
    redirect_uri: str | None,
) -> Runtime:
    cli_args = {
        "clients_file": clients_file,
        "log_level": log_level,
        "default_redirect_uri": redirect_uri,
    }
    settings = load_config(path=config_path, cli_args=cli_args)
    setup_logging(settings)

    if not settings.clients_file:
        msg = "clients_file is not configured"
        raise ConfigError(msg)
    if not settings.default_redirect_uri:
        msg = "default_redirect_uri is not configured"
        raise ConfigError(msg)

    if not settings.token_store_path:
        logger.warning("No token_store_path configured, tokens will not outlive this command")

    encryption_key = (
        settings.token_encryption_key.get_secret_value()
        if settings.token_encryption_key
        else None
    )
    try:
        request_context = StaticRequestContext(settings.default_redirect_uri)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return Runtime(
        settings=settings,
        clients=ClientRegistry.from_file(settings.clients_file),
        store=create_state_store(encryption_key, settings.token_store_path),
        request_context=request_context,
    )


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.echo(message, err=True)
    return typer.Exit(code=code)


@app.command()
def token(
    client_id: str = typer.Argument(..., help="Client id"),
    username: str | None = typer.Option(None, "--username", "-u", help="Resource owner username"),
    password: str | None = typer.Option(None, "--password", "-p", help="Resource owner password"),
    config_path: str | None = ConfigOption,
    clients_file: str | None = ClientsOption,
    log_level: str | None = LogLevelOption,
    redirect_uri: str | None = RedirectOption,
) -> None:
    """Print a valid access token, running the client's grant if needed."""
    try:
        runtime = _runtime(config_path, clients_file, log_level, redirect_uri)
        with Oauth2ClientService(runtime.request_context, runtime.store, runtime.clients) as service:
            access_token = service.get_access_token(client_id, username, password)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}") from None
    except AuthorizationRequired as e:
        typer.echo(e.authorization_url)
        raise _fail(
            "Authorization required: open the URL above, then run 'exchange'",
            EXIT_AUTHORIZATION_REQUIRED,
        ) from None
    except Oauth2ClientError as e:
        raise _fail(f"Error: {e}") from None

    typer.echo(access_token.access_token)


@app.command("authorize-url")
def authorize_url(
    client_id: str = typer.Argument(..., help="Client id"),
    config_path: str | None = ConfigOption,
    clients_file: str | None = ClientsOption,
    log_level: str | None = LogLevelOption,
    redirect_uri: str | None = RedirectOption,
) -> None:
    """Print the authorization URL for an authorization code client."""
    try:
        runtime = _runtime(config_path, clients_file, log_level, redirect_uri)
        with AuthorizationCodeGrantService(
            runtime.request_context, runtime.store, runtime.clients
        ) as service:
            url = service.get_authorization_url(client_id)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}") from None
    except Oauth2ClientError as e:
        raise _fail(f"Error: {e}") from None

    typer.echo(url)


@app.command()
def exchange(
    client_id: str = typer.Argument(..., help="Client id"),
    code: str = typer.Option(..., "--code", help="Authorization code from the callback"),
    state: str = typer.Option(..., "--state", help="State from the callback"),
    config_path: str | None = ConfigOption,
    clients_file: str | None = ClientsOption,
    log_level: str | None = LogLevelOption,
    redirect_uri: str | None = RedirectOption,
) -> None:
    """Exchange an authorization code and store the token."""
    try:
        runtime = _runtime(config_path, clients_file, log_level, redirect_uri)
        with AuthorizationCodeGrantService(
            runtime.request_context, runtime.store, runtime.clients
        ) as service:
            access_token = service.request_access_token(client_id, code, state)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}") from None
    except Oauth2ClientError as e:
        raise _fail(f"Error: {e}") from None

    typer.echo(access_token.access_token)


@app.command()
def show(
    client_id: str = typer.Argument(..., help="Client id"),
    reveal: bool = typer.Option(False, "--reveal", help="Print token values unredacted"),
    config_path: str | None = ConfigOption,
    clients_file: str | None = ClientsOption,
    log_level: str | None = LogLevelOption,
    redirect_uri: str | None = RedirectOption,
) -> None:
    """Show the stored token of a client as JSON."""
    try:
        runtime = _runtime(config_path, clients_file, log_level, redirect_uri)
        runtime.clients.get_client(client_id)
        service = Oauth2ClientService(runtime.request_context, runtime.store, runtime.clients)
        access_token = service.retrieve_access_token(client_id)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}") from None
    except Oauth2ClientError as e:
        raise _fail(f"Error: {e}") from None

    if access_token is None:
        raise _fail(f"No token stored for client '{client_id}'")

    data = access_token.to_dict()
    if not reveal:
        for key in ("access_token", "refresh_token"):
            if data[key]:
                data[key] = "***"
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


@app.command()
def clear(
    client_id: str = typer.Argument(..., help="Client id"),
    config_path: str | None = ConfigOption,
    clients_file: str | None = ClientsOption,
    log_level: str | None = LogLevelOption,
    redirect_uri: str | None = RedirectOption,
) -> None:
    """Delete the stored token of a client."""
    try:
        runtime = _runtime(config_path, clients_file, log_level, redirect_uri)
        runtime.clients.get_client(client_id)
        Oauth2ClientService(
            runtime.request_context, runtime.store, runtime.clients
        ).clear_access_token(client_id)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}") from None
    except Oauth2ClientError as e:
        raise _fail(f"Error: {e}") from None

    typer.echo(f"Cleared token for client '{client_id}'")


@app.command("clients")
def list_clients(
    config_path: str | None = ConfigOption,
    clients_file: str | None = ClientsOption,
    log_level: str | None = LogLevelOption,
    redirect_uri: str | None = RedirectOption,
) -> None:
    """List configured clients."""
    try:
        runtime = _runtime(config_path, clients_file, log_level, redirect_uri)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}") from None
    except Oauth2ClientError as e:
        raise _fail(f"Error: {e}") from None

    for client in runtime.clients:
        typer.echo(f"{client.id}\t{client.grant_type.value}\t{client.label}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
