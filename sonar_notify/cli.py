"""CLI entry point — command definitions using Click.

Commands:
    serve   Run the webhook relay HTTP server
    init    Generate a template config file
    send    Relay a saved webhook payload once
"""

import functools
import logging
import sys
from pathlib import Path

import click

from sonar_notify import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(ctx: click.Context, **overrides):
    """Load config and apply command-line overrides. Exits on error."""
    from sonar_notify.config import ConfigError, load, validate

    try:
        config = load(ctx.obj["config_path"])
        for name, value in overrides.items():
            if value is not None:
                setattr(config, name, value)
        validate(config)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)
    return config


def _handle_notify_errors(func):
    """Decorator that catches pipeline exceptions and exits cleanly."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from sonar_notify.errors import (
            DecodeError,
            DeliveryError,
            NetworkError,
            NotifyError,
            ValidationError,
        )

        try:
            return func(*args, **kwargs)
        except ValidationError as exc:
            click.echo(f"Invalid webhook: {exc}", err=True)
            sys.exit(1)
        except DecodeError as exc:
            click.echo(f"Decode error: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except DeliveryError as exc:
            click.echo(f"DingTalk rejected the message: {exc}", err=True)
            sys.exit(1)
        except NotifyError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file [default: sonar-notify.yaml if present].")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable debug logging.")
@click.version_option(__version__, prog_name="sonar-notify")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Relay SonarQube scan results to DingTalk group robots."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------

@cli.command("serve")
@click.option("--host", default=None, help="Listen address [default: 0.0.0.0].")
@click.option("--port", "-p", type=int, default=None, help="Listen port [default: 9010].")
@click.option("--multi-branch", is_flag=True, default=False,
              help="Link to branch results (SonarQube with branch support) "
                   "instead of the project dashboard.")
@click.pass_context
def serve_command(ctx: click.Context, host: str | None, port: int | None,
                  multi_branch: bool) -> None:
    """Run the webhook relay server."""
    from sonar_notify.server import create_app

    config = _load_config(ctx, host=host, port=port, multi_branch=multi_branch or None)
    app = create_app(config)

    logger.info("Server started on %s:%d (http)", config.host, config.port)
    logger.info("Support multiple branches: %s", config.multi_branch)
    app.run(host=config.host, port=config.port, debug=False, use_reloader=False)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="sonar-notify.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template sonar-notify.yaml file."""
    from sonar_notify.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------

@cli.command("send")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--access-token", required=True, help="DingTalk robot access token.")
@click.option("--sonar-token", default="", help="SonarQube user token for the measures API.")
@click.option("--multi-branch", is_flag=True, default=False,
              help="Link to branch results instead of the project dashboard.")
@click.pass_context
@_handle_notify_errors
def send_command(ctx: click.Context, payload_file: str, access_token: str,
                 sonar_token: str, multi_branch: bool) -> None:
    """Relay the webhook body saved in PAYLOAD_FILE to DingTalk."""
    from sonar_notify.dingtalk import DingTalkClient
    from sonar_notify.server import relay

    config = _load_config(ctx, multi_branch=multi_branch or None)
    body = Path(payload_file).read_bytes()
    query = {"access_token": access_token, "sonar_token": sonar_token}

    relay(query, body, config, DingTalkClient(url=config.robot_url, timeout=config.timeout))
    click.echo("Message delivered.")
