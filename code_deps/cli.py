"""Click CLI: build the graph, then query impact, staleness and fix order."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from code_deps import __version__
from code_deps.analysis.impact import DEFAULT_IMPACT_DEPTH
from code_deps.analysis.query import DEFAULT_QUERY_DEPTH
from code_deps.analysis.stale import DEFAULT_STALE_DEPTH
from code_deps.config import ProjectConfig, load_config
from code_deps.errors import CodeDepsError
from code_deps.paths import split_comma_list
from code_deps.pipeline import (
    run_build,
    run_check,
    run_impact,
    run_prioritize,
    run_query,
    run_stale,
)

_json_option = click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON")


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _heading(text: str) -> None:
    click.echo(click.style(text, fg="cyan", bold=True))


def _list(items, indent: int = 2, color: str | None = None) -> None:
    for item in items:
        click.echo(" " * indent + (click.style(item, fg=color) if color else item))


@click.group()
@click.version_option(version=__version__)
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Project root (default: nearest dir with .code-deps.json or .git)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, verbose: bool):
    """code-deps: File-level dependency graph, impact and stale analysis."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["root"] = root


def _config(ctx: click.Context) -> ProjectConfig:
    try:
        return load_config(ctx.obj.get("root"))
    except CodeDepsError as e:
        raise click.ClickException(str(e))


@cli.command()
@_json_option
@click.pass_context
def build(ctx: click.Context, as_json: bool):
    """Scan sources and write the dependency graph artifact."""
    config = _config(ctx)

    def progress(stage: str, current: int, total: int):
        if not as_json and current == 0:
            click.echo(f"  {stage}...")

    try:
        result = run_build(config, progress=progress)
    except CodeDepsError as e:
        raise click.ClickException(str(e))

    stats = result.graph.stats
    if as_json:
        _echo_json({
            "graph": str(config.graph_path),
            "stats": {
                "totalFiles": stats.total_files,
                "totalEdges": stats.total_edges,
                "cycleCount": stats.cycle_count,
            },
            "warnings": result.warnings,
        })
        return

    click.echo(f"\nDependency graph written to {config.graph_path}")
    click.echo(f"  files:  {stats.total_files}")
    click.echo(f"  edges:  {stats.total_edges}")
    color = "red" if stats.cycle_count else "green"
    click.echo(f"  cycles: {click.style(str(stats.cycle_count), fg=color)}")
    if result.warnings:
        click.echo(click.style(f"\n{len(result.warnings)} file(s) skipped:", fg="yellow"))
        _list(result.warnings)


@cli.command()
@click.option("--cycles", "show_cycles", is_flag=True, help="List circular dependencies")
@click.option("--orphans", is_flag=True, help="List files with no imports and no importers")
@click.option("--file", "file", help="Show direct imports and importers of one file")
@_json_option
@click.pass_context
def check(ctx: click.Context, show_cycles: bool, orphans: bool, file: str | None, as_json: bool):
    """Check graph health: cycles, orphans, single-file edges."""
    config = _config(ctx)
    try:
        report = run_check(config, orphans=orphans, file=file)
    except CodeDepsError as e:
        raise click.ClickException(str(e))

    if as_json:
        _echo_json(report.to_dict())
        return

    if show_cycles or not (orphans or file):
        if report.cycles:
            _heading(f"{len(report.cycles)} circular dependenc{'y' if len(report.cycles) == 1 else 'ies'}:")
            for cycle in report.cycles:
                click.echo("  " + click.style(" -> ".join(cycle.files + cycle.files[:1]), fg="red"))
        else:
            click.echo(click.style("No circular dependencies.", fg="green"))

    if report.orphans is not None:
        _heading(f"{len(report.orphans)} orphan file(s):")
        _list(report.orphans, color="yellow")

    if report.file is not None:
        query = report.file
        _heading(query.file)
        click.echo(f"  imports ({len(query.imports)}):")
        _list(query.imports, indent=4)
        click.echo(f"  imported by ({len(query.imported_by)}):")
        _list(query.imported_by, indent=4)


@cli.command()
@click.argument("file")
@click.option("--depth", "-d", default=DEFAULT_QUERY_DEPTH, show_default=True, help="Max chain depth")
@_json_option
@click.pass_context
def query(ctx: click.Context, file: str, depth: int, as_json: bool):
    """Show what FILE imports and what imports it, transitively."""
    config = _config(ctx)
    try:
        results = run_query(config, file, max_depth=depth)
    except CodeDepsError as e:
        raise click.ClickException(str(e))

    if as_json:
        _echo_json([r.to_dict() for r in results])
        return

    for result in results:
        _heading(result.file)
        click.echo(f"  imports: {len(result.imports)} direct, {len(result.imports_chain)} total")
        for link in result.imports_chain:
            click.echo(f"    {'  ' * (link.depth - 1)}{link.file}")
        click.echo(f"  imported by: {len(result.imported_by)} direct, {len(result.imported_by_chain)} total")
        for link in result.imported_by_chain:
            click.echo(f"    {'  ' * (link.depth - 1)}{link.file}")
        click.echo()


@cli.command()
@click.argument("files", nargs=-1, required=True)
@click.option("--depth", "-d", default=DEFAULT_IMPACT_DEPTH, show_default=True, help="Impact depth (max 2)")
@_json_option
@click.pass_context
def impact(ctx: click.Context, files: tuple[str, ...], depth: int, as_json: bool):
    """Show which files are affected if FILES change."""
    config = _config(ctx)
    try:
        result = run_impact(config, split_comma_list(files), depth)
    except CodeDepsError as e:
        raise click.ClickException(str(e))

    if as_json:
        _echo_json(result.to_dict())
        return

    _heading(f"Impact of {len(result.changed)} changed file(s), depth {result.depth}")
    click.echo(f"  L1 (direct):     {len(result.l1)}")
    _list(sorted(result.l1), indent=4)
    if result.depth >= 2:
        click.echo(f"  L2 (transitive): {len(result.l2)}")
        _list(sorted(result.l2), indent=4)
    click.echo(f"  total affected:  {len(result.affected)}")

    if result.module_breakdown:
        click.echo("\nBy module:")
        for mod, count in result.module_breakdown.items():
            click.echo(f"  {mod}: {count}")

    if result.high_risk:
        click.echo(click.style("\nHigh-risk changes:", fg="red"))
        for h in result.high_risk:
            click.echo(f"  {h.file}  ({h.affected_count} dependents)")

    if result.test_files is not None:
        click.echo(f"\nTests to run ({len(result.test_files)}):")
        _list(result.test_files)


@cli.command()
@click.option("--changed", "-c", multiple=True, help="Changed file(s); comma lists accepted. Default: detect by mtime")
@click.option("--depth", "-d", default=DEFAULT_STALE_DEPTH, show_default=True, help="Propagation depth (max 25)")
@click.option("--tests", is_flag=True, help="Translate stale files into tests to run")
@_json_option
@click.pass_context
def propagate(ctx: click.Context, changed: tuple[str, ...], depth: int, tests: bool, as_json: bool):
    """Propagate staleness from changed files to their dependents."""
    config = _config(ctx)
    try:
        result = run_stale(config, split_comma_list(changed), depth, tests=tests)
    except CodeDepsError as e:
        raise click.ClickException(str(e))

    if as_json:
        _echo_json(result.to_dict())
        return

    if not result.direct_stale:
        click.echo(click.style("Nothing is stale.", fg="green"))
        return

    _heading(f"Direct ({result.summary.direct}):")
    _list([d.file for d in result.direct_stale], color="yellow")
    if result.propagated_stale:
        _heading(f"Propagated ({result.summary.propagated}):")
        for p in result.propagated_stale:
            click.echo(f"  L{p.level}  {p.file}  {click.style('<- ' + p.source, dim=True)}")
    click.echo(f"\nTotal stale: {len(result.stale_files)}")

    if result.tests_to_run is not None:
        click.echo(f"\nTests to run ({len(result.tests_to_run)}):")
        _list(result.tests_to_run)


@cli.command()
@click.option("--failing", "-f", multiple=True, help="Failing test file(s); default: read the test-result artifact")
@click.option("--no-save", is_flag=True, help="Do not write the fix plan artifact")
@_json_option
@click.pass_context
def prioritize(ctx: click.Context, failing: tuple[str, ...], no_save: bool, as_json: bool):
    """Order failing source files so cascading fixes come first."""
    config = _config(ctx)
    try:
        result = run_prioritize(config, split_comma_list(failing), save=not no_save)
    except CodeDepsError as e:
        raise click.ClickException(str(e))

    if as_json:
        _echo_json(result.to_dict())
        return

    click.echo(f"{result.total_failing} failing test(s) across {result.source_files} source file(s)\n")

    if result.root_causes:
        _heading("Root causes (fix first):")
        for i, p in enumerate(result.root_causes, 1):
            label = f"  [{p.priority}]" if p.priority else ""
            click.echo(
                f"  {i:>2}. {p.file}  "
                f"{p.dependents} dependents, {p.failure_count} failing, "
                f"{p.potential_fixes} potential fixes{label}"
            )

    if result.independent:
        _heading("\nIndependent batches:")
        for i, batch in enumerate(result.independent, 1):
            click.echo(f"  batch {i} ({batch.tests} tests): {', '.join(batch.files)}")

    if result.unmapped_tests:
        click.echo(click.style(f"\nUnmapped tests ({len(result.unmapped_tests)}):", fg="yellow"))
        _list(result.unmapped_tests)

    if not no_save:
        click.echo(f"\nFix plan written to {config.fix_plan_path}")


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
@click.pass_context
def serve(ctx: click.Context, port: int, host: str):
    """Serve the read-only JSON API."""
    import uvicorn

    from code_deps.web import create_app

    config = _config(ctx)
    click.echo(f"Serving code-deps API for {config.root} at http://{host}:{port}/api")
    uvicorn.run(create_app(config), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
