"""Changelog command implementation."""

import sys
import uuid

import click

from ..changelog import (
    DEFAULT_BATCH_SIZE,
    ChangelogResult,
    branch_matches,
    compile_branch_pattern,
    generate_changelog,
    resolve_to_ref,
    upsert_comment,
)
from ..changelog.generator import DEFAULT_BRANCH_PATTERN
from ..config import DEFAULT_CONFIG_PATH, load_changelog_config


def write_outputs(path, outputs):
    """Append outputs to a GitHub Actions style output file.

    Every value uses the heredoc form so multi-line bodies survive.
    """
    with open(path, 'a', encoding='utf-8') as f:
        for key, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")


def emit(result, output_file):
    click.echo(result.body)
    if output_file:
        write_outputs(output_file, result.outputs())


@click.command()
@click.option('--sha', envvar='GITHUB_SHA', required=True, help='Head commit to build the changelog for')
@click.option('--ref', '-r', 'head_ref', envvar=['GITHUB_HEAD_REF', 'GITHUB_REF_NAME'],
              help='Head branch name (defaults to the short SHA in the output)')
@click.option('--project', '-p', help='Project path (owner/repo or GitLab path)')
@click.option('--platform', type=click.Choice(['github', 'gitlab']), help='Hosting platform (overrides global setting)')
@click.option('--host', help='API host URL (overrides global setting)')
@click.option('--token', help='API token (overrides global setting)')
@click.option('--branch-pattern', default=DEFAULT_BRANCH_PATTERN, show_default=True,
              help='Regex the head branch must match')
@click.option('--configuration', default=DEFAULT_CONFIG_PATH, show_default=True,
              help='Changelog configuration file (YAML or JSON)')
@click.option('--pr', 'pr_number', type=int, help='Pull/merge request number to comment on')
@click.option('--post-comment/--no-post-comment', default=True, help='Post or update the changelog comment')
@click.option('--batch-size', type=click.IntRange(min=1), default=DEFAULT_BATCH_SIZE, show_default=True,
              help='Concurrent API requests per batch')
@click.option('--output-file', '-o', envvar='GITHUB_OUTPUT', type=click.Path(dir_okay=False),
              help='Append body, prev_tag and count to this file')
@click.pass_context
def changelog(ctx, sha, head_ref, project, platform, host, token, branch_pattern,
              configuration, pr_number, post_comment, batch_size, output_file):
    """Build the changelog since the previous reachable tag."""

    # Import here to avoid circular dependency
    from .main import create_client

    logger = ctx.obj['logger']

    try:
        pattern = compile_branch_pattern(branch_pattern)

        if head_ref is None:
            logger.info("No head ref given; branch_pattern not checked")
        elif not branch_matches(pattern, head_ref):
            logger.info(f"Ref \"{head_ref}\" does not match branch_pattern; skipping")
            emit(ChangelogResult(), output_file)
            return

        config = load_changelog_config(configuration)
        client, settings = create_client(ctx, project, platform, host, token)
        to_ref = resolve_to_ref(head_ref, sha)

        logger.info(f"Building changelog for {settings.project} at {to_ref} ({sha})")
        result = generate_changelog(client, config, sha, to_ref, batch_size)

        if post_comment and result.body:
            if pr_number:
                upsert_comment(client, pr_number, result.body)
            else:
                logger.info("No pull request number; skipping comment")

        emit(result, output_file)

    except Exception as e:
        logger.debug("Changelog run failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
