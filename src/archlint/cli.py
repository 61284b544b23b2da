"""archlint CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from archlint import __version__

_PROJECT_OPTION = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)


@click.group()
@click.version_option(version=__version__, prog_name="archlint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """archlint - architecture linter for Go projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


@main.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict/--no-strict",
    default=False,
    help="Fail on every violation, including shared-import warnings.",
)
@click.option("--exit-zero", is_flag=True, help="Always exit 0, even with violations.")
@click.option("--detailed", is_flag=True, help="Track which symbols each import uses.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: <project>/.archlint.yml).",
)
@click.option("--no-coverage", is_flag=True, help="Skip running go test -cover.")
@_PROJECT_OPTION
@click.pass_context
def lint(
    ctx: click.Context,
    *,
    fmt: str | None,
    strict: bool,
    exit_zero: bool,
    detailed: bool,
    config_path: Path | None,
    no_coverage: bool,
    project: Path | None,
) -> None:
    """Check the project's imports and layout against .archlint.yml.

    Exit codes: 0 = clean (or only warnings), 1 = failing violations,
    2 = configuration or parse error.
    """
    from archlint.linter import LintError, format_json, format_porcelain, format_rich
    from archlint.linter import lint as run_lint
    from archlint.linter import should_fail

    project_root = project or Path.cwd()

    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = run_lint(
            project_root,
            detailed=detailed,
            config_path=config_path,
            measure_coverage=not no_coverage,
        )
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if fmt == "rich" and result.coverage_summaries and not ctx.obj.get("quiet"):
        from rich.console import Console

        from archlint.infrastructure.coverage_runner import summary_table

        Console(stderr=True).print(
            summary_table(result.coverage_summaries, result.overall_coverage or 0.0)
        )

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if exit_zero:
        return
    if (strict and result.violations) or should_fail(result):
        sys.exit(1)


@main.command()
@click.option("--detailed", is_flag=True, help="List the symbols used from each import.")
@_PROJECT_OPTION
def graph(*, detailed: bool, project: Path | None) -> None:
    """Print the file-level dependency graph as markdown."""
    from archlint.linter import LintError, format_graph_markdown
    from archlint.linter import lint as run_lint

    project_root = project or Path.cwd()
    try:
        result = run_lint(project_root, detailed=detailed, measure_coverage=False)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if result.graph is not None:
        click.echo(format_graph_markdown(result.graph))


@main.command()
@click.option("--preset", default=None, help="Architecture preset (see `archlint presets`).")
@click.option(
    "--create-dirs/--no-create-dirs",
    default=False,
    help="Create the preset's required directories.",
)
@_PROJECT_OPTION
def init(*, preset: str | None, create_dirs: bool, project: Path | None) -> None:
    """Create .archlint.yml, from a preset or with the default cmd/pkg/internal rules."""
    from archlint.onboarding.presets import create_config_from_preset, create_default_config

    project_root = project or Path.cwd()
    try:
        if preset:
            path = create_config_from_preset(project_root, preset, create_dirs=create_dirs)
        else:
            path = create_default_config(project_root)
    except (ValueError, OSError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    label = f" with '{preset}' preset" if preset else ""
    click.echo(f"✓ Created {path.name}{label}")
    if preset and create_dirs:
        from archlint.onboarding.presets import get_preset

        for dir_path in get_preset(preset).required_directories:
            click.echo(f"✓ Created directory {dir_path}")


@main.command()
@click.option("--preset", default=None, help="Switch to another preset while refreshing.")
@_PROJECT_OPTION
def refresh(*, preset: str | None, project: Path | None) -> None:
    """Update the preset section of .archlint.yml, keeping your overrides."""
    from archlint.onboarding.presets import refresh_config

    project_root = project or Path.cwd()
    try:
        name = refresh_config(project_root, preset)
    except (ValueError, OSError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    click.echo(f"✓ Refreshed .archlint.yml with '{name}' preset (backup: .archlint.yml.backup)")
    click.echo("ℹ Your 'overrides' section has been preserved.")


@main.command("presets")
def list_presets() -> None:
    """List the built-in architecture presets."""
    from rich.console import Console
    from rich.table import Table

    from archlint.onboarding.presets import PRESETS

    table = Table(title="Presets", show_header=True, box=None, padding=(0, 1))
    table.add_column("name", style="cyan")
    table.add_column("description")
    table.add_column("layers")
    for preset in PRESETS.values():
        table.add_row(preset.name, preset.description, ", ".join(preset.directories_import))
    Console().print(table)
