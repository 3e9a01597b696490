"""Main CLI entry point for tagbridge."""

import logging
import sys
from datetime import datetime

import click

from .. import __version__
from ..config import DEFAULT_CONFIG_PATH, Settings, create_sample_config, get_settings
from ..github import GitHubClient
from ..gitlab import GitLabClient
from .changelog import changelog


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--platform', type=click.Choice(['github', 'gitlab']),
              help='Hosting platform (can also be set per command)')
@click.option('--host', help='API host URL (can also be set per command)')
@click.option('--token', help='API token (can also be set per command)')
@click.option('--config-file', '-c', help='Path to JSON settings file')
@click.version_option(version=__version__, prog_name="tagbridge")
@click.pass_context
def cli(ctx, debug, platform, host, token, config_file):
    """Tagbridge - changelog previews for release branches."""

    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    ctx.obj['base_settings'] = get_settings(config_file)
    ctx.obj['global_platform'] = platform
    ctx.obj['global_host'] = host
    ctx.obj['global_token'] = token
    ctx.obj['logger'] = logging.getLogger('tagbridge')


def create_client(ctx, project=None, platform=None, host=None, token=None):
    """Create the platform client with option precedence: command, global, settings."""
    base = ctx.obj['base_settings']
    logger = ctx.obj['logger']

    settings = Settings(
        platform=platform or ctx.obj['global_platform'] or base.platform,
        host=host or ctx.obj['global_host'] or base.host,
        token=token or ctx.obj['global_token'] or base.token,
        project=project or base.project,
    )

    if not settings.token:
        click.echo("Error: API token is required. Set TAGBRIDGE_TOKEN, use --token, or a settings file", err=True)
        sys.exit(1)

    if not settings.project:
        click.echo("Error: Project is required. Use --project or a settings file", err=True)
        sys.exit(1)

    if settings.platform == 'gitlab':
        return GitLabClient(settings, logger), settings
    return GitHubClient(settings, logger), settings


@cli.command()
@click.option('--path', '-p', default=DEFAULT_CONFIG_PATH, help='Path for the config file')
def init_config(path):
    """Create a sample changelog configuration file."""
    try:
        create_sample_config(path)
    except OSError as e:
        click.echo(f"Error creating config file: {e}", err=True)
        sys.exit(1)
    click.echo(f"Sample configuration file created at: {path}")


@cli.command()
def version():
    """Show version information."""
    build_date = datetime.now().strftime('%Y-%m-%d')
    click.echo(f"tagbridge version {__version__} (run {build_date})")


cli.add_command(changelog)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == '__main__':
    main()
