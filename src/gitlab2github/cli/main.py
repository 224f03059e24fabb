"""Main CLI entry point for the GitLab to GitHub migration tool."""

import asyncio
import sys
from typing import Any, Callable, Coroutine, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config.config import Config
from ..migration.engine import MigrationEngine
from ..migration.orchestrator import MigrationCoordinator, MigrationSummary
from ..models.repository import RepositorySystem
from ..utils.logging import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name='gitlab2github')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    '--debug',
    '-D',
    is_flag=True,
    help='Enable debug logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """GitLab to GitHub Migration Tool - import repositories and replay labels, milestones, issues and comments."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    setup_logging('DEBUG' if verbose else 'INFO')


@cli.command()
@click.option(
    '--output',
    '-o',
    default='config.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    try:
        Config.create_template(output)
    except OSError as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)

    console.print(f'[green]✓[/green] Configuration template created at: {output}')
    console.print(f'[yellow]Please edit {output} with your tokens and organization[/yellow]')


@cli.command(name='list')
@click.pass_context
def list_known(ctx: click.Context) -> None:
    """List the repositories named in the configuration."""
    config = _load_or_exit(ctx)
    names = config.repositories

    if not names:
        console.print('[yellow]No repositories configured[/yellow]')
        return

    for name in names:
        console.print(name)


@cli.command()
@click.pass_context
def projects(ctx: click.Context) -> None:
    """List the projects on GitLab and the repositories on GitHub."""
    repositories = _run_coordinator(ctx, lambda c: c.list_projects())

    for system in RepositorySystem:
        table = Table(title=f'{system.value.title()} repositories')
        table.add_column('ID', style='blue')
        table.add_column('Name', style='cyan')
        table.add_column('Description')
        table.add_column('URL', style='green')

        for repo in repositories[system]:
            table.add_row(
                str(repo.id), repo.name, repo.description or '', repo.web_url or ''
            )

        console.print(table)


@cli.command(name='import')
@click.argument('name', required=False)
@click.option('--all', '-A', 'import_all', is_flag=True, help='Import every known repository')
@click.pass_context
def import_command(ctx: click.Context, name: Optional[str], import_all: bool) -> None:
    """Import a GitLab repository into a new private GitHub repository."""
    if import_all:
        summary = _run_coordinator(ctx, lambda c: c.import_all())
        _display_summary(summary)
        if summary.failed:
            sys.exit(1)
        return

    if not name:
        raise click.UsageError('Give a repository name or --all')

    result = _run_coordinator(ctx, lambda c: c.import_one(name))
    console.print(
        f'[green]✓[/green] Imported {result.repository} '
        f'after {result.polls} status checks'
    )


@cli.command()
@click.argument('name')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def remove(ctx: click.Context, name: str, yes: bool) -> None:
    """Delete a repository from the GitHub organization."""
    if not yes:
        click.confirm(f'Delete GitHub repository {name}?', abort=True)

    _run_coordinator(ctx, lambda c: c.remove_one(name))
    console.print(f'[green]✓[/green] Removed {name}')


@cli.command()
@click.option('--repo', '-r', help='Migrate only this repository')
@click.pass_context
def migrate(ctx: click.Context, repo: Optional[str]) -> None:
    """Migrate labels, milestones, issues and comments."""
    if repo:
        result = _run_coordinator(ctx, lambda c: c.migrate_one(repo))
        details = ', '.join(f'{k}: {v}' for k, v in result.metadata.items())
        console.print(f'[green]✓[/green] Migrated {repo} ({details})')
        return

    summary = _run_coordinator(ctx, lambda c: c.migrate_all())
    _display_summary(summary)
    if summary.failed:
        sys.exit(1)


@cli.command()
@click.argument('name')
@click.pass_context
def authors(ctx: click.Context, name: str) -> None:
    """Show how the issue authors and assignees of a project map to GitHub."""
    mapping = _run_coordinator(ctx, lambda c: c.map_authors(name))

    table = Table(title=f'Authors of {name}')
    table.add_column('GitLab', style='cyan')
    table.add_column('GitHub', style='green')

    for gitlab_user, github_user in mapping.items():
        table.add_row(gitlab_user, github_user or '[red]unmapped[/red]')

    console.print(table)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Check that both APIs are reachable with the configured tokens."""
    config = _load_or_exit(ctx)

    try:
        with MigrationEngine(config) as engine:
            engine.test_connectivity()
    except Exception as e:
        console.print(f'[red]✗[/red] Validation failed: {e}')
        sys.exit(1)

    console.print('[green]✓[/green] Connectivity validation passed')


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    config = _load_or_exit(ctx)

    table = Table(title='Migration Configuration')
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')

    table.add_row('GitLab URL', config.gitlab.url)
    table.add_row('GitLab token', _mask(config.gitlab.token))
    table.add_row('GitHub URL', config.github.url)
    table.add_row('GitHub token', _mask(config.github.token))
    table.add_row('GitHub organization', config.github.organization)
    table.add_row('Write delay', f'{config.migration.write_delay}s')
    table.add_row('Import poll interval', f'{config.migration.import_poll_interval}s')
    table.add_row('Import timeout', str(config.migration.import_timeout))
    table.add_row(
        'Concurrent repositories', str(config.migration.max_concurrent_repositories)
    )
    table.add_row('Default assignee', config.migration.default_assignee or '-')
    table.add_row('Mapped users', str(len(config.users)))
    table.add_row('Known repositories', str(len(config.repositories)))

    console.print(table)


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return '[red]not set[/red]'
    return secret[:4] + '…' if len(secret) > 8 else '****'


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    return Config.discover(ctx.obj.get('config_path'))


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)
    log_level = 'DEBUG' if verbose else config.logging.level

    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


def _load_or_exit(ctx: click.Context) -> Config:
    try:
        config = _load_config(ctx)
    except (FileNotFoundError, ValueError) as e:
        console.print(f'[red]✗[/red] {e}')
        sys.exit(1)

    _setup_logging_with_config(ctx, config)
    return config


def _run_coordinator(
    ctx: click.Context,
    operation: Callable[[MigrationCoordinator], Coroutine[Any, Any, Any]],
) -> Any:
    """Run one coordinator operation and exit with status 1 if it fails."""
    config = _load_or_exit(ctx)

    try:
        with MigrationEngine(config) as engine:
            return asyncio.run(operation(engine.coordinator))
    except Exception as e:
        console.print(f'[red]✗[/red] {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _display_summary(summary: MigrationSummary) -> None:
    """Display batch results."""
    table = Table(title=f'{summary.operation.title()} Summary')
    table.add_column('Repository', style='cyan')
    table.add_column('Status')
    table.add_column('Details')

    for result in summary.results:
        if result.success:
            details = ', '.join(f'{k}: {v}' for k, v in result.metadata.items())
            table.add_row(result.repository, '[green]✓[/green]', details)
        else:
            table.add_row(result.repository, '[red]✗[/red]', result.error_message or '')

    console.print(table)

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Duration:[/blue] {duration}')

    style = 'red' if summary.failed else 'green'
    console.print(
        Panel.fit(
            f'{summary.successful} of {summary.total} repositories succeeded',
            border_style=style,
        )
    )


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Interrupted by user[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
