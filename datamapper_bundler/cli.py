"""Thin CLI wrapper for datamapper_bundler.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from datamapper_bundler import __version__
from datamapper_bundler.config import Settings, get_settings, print_settings_json

app = typer.Typer(
    name="dm-bundler",
    help="Data Mapper Bundler - bundle TypeScript data mappers through Maven",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"datamapper-bundler version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Route library log records to the console."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _settings_with_overrides(
    resources: Path | None = None,
    working_dir: Path | None = None,
    continue_on_error: bool = False,
) -> Settings:
    settings = get_settings()
    overrides: dict[str, object] = {}
    if resources is not None:
        overrides["resources_dir"] = resources
    if working_dir is not None:
        overrides["working_dir"] = working_dir
    if continue_on_error:
        overrides["fail_fast"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Data Mapper Bundler - bundle TypeScript data mappers through Maven."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True)
    else:
        working_dir_display = (
            str(settings.working_dir) if settings.working_dir else "(current directory)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Paths:[/bold]")
        console.print(f"  Working directory:   {working_dir_display}")
        console.print(f"  Resources directory: {settings.resources_dir}")
        console.print(f"  Data mapper path:    {settings.data_mapper_dir}")
        console.print(f"  Staging directory:   {settings.staging_dir_name}")
        console.print()
        console.print("[bold]Toolchain:[/bold]")
        console.print(f"  POM file:            {settings.pom_file}")
        console.print(f"  Maven command:       {settings.maven_command}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Fail fast:           {settings.fail_fast}")
        console.print(f"  Log level:           {settings.log_level}")


@app.command()
def scan(
    resources: Annotated[
        Path | None,
        typer.Option("--resources", "-r", help="Project resource root"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List the data mapper modules that would be bundled."""
    from datamapper_bundler.bundles.scanner import list_modules
    from datamapper_bundler.bundles.service import resolve_module_root
    from datamapper_bundler.bundles.workspace import SOURCE_EXTENSION

    settings = _settings_with_overrides(resources=resources)
    module_root = resolve_module_root(settings, settings.resolve_working_dir())
    modules = list_modules(module_root)

    if json_output:
        output = [
            {
                "name": m.name,
                "source_dir": str(m.source_dir),
                "source_files": [
                    f.relative_to(m.source_dir).as_posix()
                    for f in m.source_files(SOURCE_EXTENSION)
                ],
            }
            for m in modules
        ]
        console.print(json.dumps(output, indent=2), soft_wrap=True)
        return

    if not modules:
        console.print(f"[yellow]No data mappers found in {module_root}[/yellow]")
        return

    console.print(f"[bold]Found {len(modules)} data mapper(s):[/bold]")
    console.print()
    for m in modules:
        console.print(f"  [green]{m.name}[/green]")
        console.print(f"    Directory: {m.source_dir}")
        console.print(f"    Sources: {len(m.source_files(SOURCE_EXTENSION))}")


@app.command()
def probe() -> None:
    """Locate the Maven installation used for bundling."""
    from datamapper_bundler.bundles.toolchain import find_maven_home

    settings = get_settings()
    home = find_maven_home(settings.maven_command)
    if home is None:
        console.print("[red]Could not determine Maven home[/red]")
        raise typer.Exit(code=1)
    console.print(f"Maven home: {home}")


@app.command()
def bundle(
    resources: Annotated[
        Path | None,
        typer.Option("--resources", "-r", help="Project resource root"),
    ] = None,
    working_dir: Annotated[
        Path | None,
        typer.Option("--working-dir", "-w", help="Directory for transient files"),
    ] = None,
    continue_on_error: Annotated[
        bool,
        typer.Option(
            "--continue-on-error",
            help="Keep bundling remaining modules after a module fails",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Bundle every data mapper module of the project."""
    from datamapper_bundler.bundles.service import bundle_data_mappers

    settings = _settings_with_overrides(resources, working_dir, continue_on_error)
    report = bundle_data_mappers(settings)

    if json_output:
        console.print(json.dumps(report.to_dict(), indent=2), soft_wrap=True)
    else:
        status_color = {
            "succeeded": "green",
            "failed": "red",
            "skipped": "yellow",
        }
        for m in report.modules:
            color = status_color.get(m.status.value, "white")
            console.print(f"  [{color}]{m.name}: {m.status.value}[/{color}]")
            for warning in m.warnings:
                console.print(f"    [yellow]warning:[/yellow] {warning}")
        for warning in report.warnings:
            console.print(f"  [yellow]warning:[/yellow] {warning}")
        if report.success:
            console.print(f"[green]{report.message}[/green]")
        else:
            console.print(f"[red]{report.message}[/red]")

    if not report.success:
        raise typer.Exit(code=1)


@app.command()
def clean(
    working_dir: Annotated[
        Path | None,
        typer.Option("--working-dir", "-w", help="Directory for transient files"),
    ] = None,
) -> None:
    """Remove files left behind by an interrupted bundling run."""
    from datamapper_bundler.bundles.cleanup import clean_all
    from datamapper_bundler.bundles.workspace import WorkspaceLayout

    settings = _settings_with_overrides(working_dir=working_dir)
    layout = WorkspaceLayout(settings.resolve_working_dir(), settings.staging_dir_name)
    result = clean_all(layout)
    if not result.success:
        console.print(f"[red]{result.message}; failed: {result.details['failed']}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{result.message}[/green]")


if __name__ == "__main__":
    app()
