"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import typer

from helm_composer import __version__

app = typer.Typer(
    name="hcomp",
    help="Helm Composer - Turn Kubernetes manifests into Helm charts.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hcomp {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit",
    ),
) -> None:
    pass


def _register_commands() -> None:
    from helm_composer.cli.commands.generate_cmd import app as generate_app
    from helm_composer.cli.commands.analyze_cmd import app as analyze_app
    from helm_composer.cli.commands.kinds_cmd import app as kinds_app

    app.add_typer(generate_app, name="generate", help="Generate Helm charts from manifests")
    app.add_typer(analyze_app, name="analyze", help="Show service groups and relationships")
    app.add_typer(kinds_app, name="kinds", help="List registered kind rules")


_register_commands()


def main() -> None:
    app()
