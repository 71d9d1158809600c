"""Config commands -- view and modify global configuration.

Provides the ``apidex config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~apidex.models.GlobalConfig`). Settings control defaults such as
the spec to load, the responder's search limit and URI scheme, and the
output format.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from apidex.commands.common import fail
from apidex.exceptions import ApidexError
from apidex.exit_codes import EXIT_INVALID_USAGE
from apidex.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_NULL_VALUES = ("none", "null")


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        apidex config show
        apidex config show --json
    """
    from apidex.config import global_config_path, load_global_config

    try:
        config = load_global_config()
    except ApidexError as exc:
        fail(exc)
    info(f"Config file: {global_config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'output.format')."
    ),
    value: str = typer.Argument(help="Value to set ('none' clears optional keys)."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the
    existing field's type (bool or int); optional keys accept ``none``.
    The updated config is validated before saving.

    Example::

        apidex config set default_spec ./openapi.yaml
        apidex config set search_limit 50
        apidex config set output.format json
    """
    from apidex.config import load_global_config, save_global_config
    from apidex.models import GlobalConfig

    try:
        config = load_global_config()
    except ApidexError as exc:
        fail(exc)
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    coerced: object
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    elif value.lower() in _NULL_VALUES:
        # Required keys reject this during validation below.
        coerced = None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is given.

    Example::

        apidex config reset --force
    """
    from apidex.config import save_global_config
    from apidex.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
