#!/usr/bin/env python3
"""
auto-mr CLI - Main entry point.

Commands:
- mr: push the branch, open a merge request, wait for CI, then merge
- watch: wait for CI on a commit and exit with its outcome
- labels: list the repository labels
- config: show the resolved configuration
"""
import subprocess
import sys
from typing import Optional

import click
from loguru import logger
from rich.markup import escape

from automr import __version__
from automr.ci.aggregation import is_clean
from automr.ci.exceptions import (
    CIProviderError,
    ConfigError,
    LabelError,
    PipelineFailedError,
    PipelineTimeoutError,
)
from automr.ci.formatting import format_duration
from automr.ci.poller import CompletionPoller
from automr.config.loader import default_config_path, load_config
from automr.config.models import resolve_pipeline_timeout
from automr.mr.labels import select_labels
from automr.mr.workflow import MergeRequestWorkflow
from automr.platforms.models import CreateParams
from automr.platforms.registry import create_provider, detect_platform
from automr.platforms.remote import parse_remote
from automr.utils.display import get_display_manager

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_TIMEOUT = 2
EXIT_CONFIG = 3

DEFAULT_BRANCHES = ("main", "master")


def git_output(*args: str) -> str:
    """
    Run a git command and return its stripped stdout.

    Raises:
        click.ClickException: If git is missing or the command fails
    """
    try:
        result = subprocess.run(
            ["git", *args], capture_output=True, text=True, check=True, timeout=30
        )
    except FileNotFoundError as e:
        raise click.ClickException("git executable not found") from e
    except subprocess.CalledProcessError as e:
        raise click.ClickException(f"git {' '.join(args)} failed: {e.stderr.strip()}") from e
    except subprocess.TimeoutExpired as e:
        raise click.ClickException(f"git {' '.join(args)} timed out") from e
    return result.stdout.strip()


def main_branch() -> str:
    """Default branch of origin, falling back to a local main or master."""
    try:
        ref = git_output("symbolic-ref", "--short", "refs/remotes/origin/HEAD")
        return ref.split("/", 1)[-1]
    except click.ClickException as e:
        logger.debug(f"origin/HEAD not set: {e.message}")

    for branch in DEFAULT_BRANCHES:
        try:
            git_output("rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
            return branch
        except click.ClickException:
            continue
    raise click.ClickException("Could not determine the main branch, use --target")


def cleanup_branches(target: str, source: str) -> None:
    """
    Switch to the target branch, update it and drop the merged branch.

    Switching and pulling must succeed; pruning and branch deletion only warn.
    """
    display = get_display_manager()
    git_output("checkout", target)
    git_output("pull", "--ff-only")

    for args in (("fetch", "--prune"), ("branch", "-D", source)):
        try:
            git_output(*args)
        except click.ClickException as e:
            logger.warning(e.message)
            display.show_warning(e.message)


@click.group()
@click.version_option(version=__version__, prog_name="automr")
@click.option('--verbose', '-v', is_flag=True, help='Log to stderr as well as the log file')
@click.option('--log-level', '-l', type=click.Choice(['debug', 'info', 'warn', 'error'], case_sensitive=False),
              default=None, help='Console log level (implies --verbose)')
@click.pass_context
def cli(ctx, verbose, log_level):
    """auto-mr - merge request automation for GitHub and GitLab."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose or log_level is not None

    from automr.utils.logger import setup_logger
    try:
        setup_logger(verbose=ctx.obj['verbose'], level=log_level)
    except ValueError as e:
        raise click.UsageError(f"Invalid logging configuration: {e}") from e


@cli.command()
@click.option('--remote', '-r', default=None, help='Git remote URL (default: origin)')
@click.option('--sha', '-s', default=None, help='Commit SHA to watch (default: HEAD)')
@click.option('--timeout', '-t', default=None, help="Maximum wait, e.g. '30m' or '1h30m'")
@click.option('--poll-interval', type=float, default=None, help='Seconds between polls')
@click.pass_context
def watch(ctx, remote: Optional[str], sha: Optional[str], timeout: Optional[str],
          poll_interval: Optional[float]):
    """Wait for CI on a commit to finish."""
    display = get_display_manager()

    try:
        config = load_config()
        remote = remote or git_output("remote", "get-url", "origin")
        sha = sha or git_output("rev-parse", "HEAD")
        platform = detect_platform(parse_remote(remote).host)
        timeout_seconds = resolve_pipeline_timeout(timeout, config.for_platform(platform))
        provider = create_provider(remote, config)
    except (ConfigError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        display.show_error("Configuration error", str(e))
        sys.exit(EXIT_CONFIG)

    interval = poll_interval or config.watch.poll_interval
    logger.info(f"Watching CI for {sha[:12]} on {platform} (timeout {format_duration(timeout_seconds)})")
    display.show_info(f"Waiting for pipelines on {sha[:12]} (timeout {format_duration(timeout_seconds)})")

    try:
        with display.job_board() as board:
            poller = CompletionPoller(
                provider,
                board,
                poll_interval=interval,
                refresh_interval=config.watch.refresh_interval,
            )
            conclusion = poller.wait(sha, timeout_seconds)
    except PipelineTimeoutError as e:
        logger.warning(str(e))
        sys.exit(EXIT_TIMEOUT)
    except CIProviderError as e:
        display.show_error("CI provider error", str(e))
        sys.exit(EXIT_FAILURE)

    sys.exit(EXIT_SUCCESS if is_clean(conclusion) else EXIT_FAILURE)


@cli.command()
@click.option('--remote', '-r', default=None, help='Git remote URL (default: origin)')
@click.option('--target', '-b', default=None, help='Target branch (default: origin HEAD)')
@click.option('--msg', '-m', 'title', default=None, help='Title (default: last commit subject)')
@click.option('--body', default=None, help='Description (default: last commit body)')
@click.option('--labels', default=None,
              help='Comma-separated labels; empty string for none (default: from commit type)')
@click.option('--no-squash', is_flag=True, help='Keep commit history instead of squashing')
@click.option('--timeout', '-t', default=None, help="Maximum CI wait, e.g. '30m' or '1h30m'")
@click.option('--no-push', is_flag=True, help='Do not push the branch first')
@click.option('--no-cleanup', is_flag=True, help='Stay on the branch after merging')
@click.pass_context
def mr(ctx, remote: Optional[str], target: Optional[str], title: Optional[str],
       body: Optional[str], labels: Optional[str], no_squash: bool, timeout: Optional[str],
       no_push: bool, no_cleanup: bool):
    """Open a merge request for the current branch, wait for CI and merge it."""
    display = get_display_manager()
    squash = not no_squash

    try:
        config = load_config()
        remote = remote or git_output("remote", "get-url", "origin")
        platform = detect_platform(parse_remote(remote).host)
        timeout_seconds = resolve_pipeline_timeout(timeout, config.for_platform(platform))
        provider = create_provider(remote, config)
    except (ConfigError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        display.show_error("Configuration error", str(e))
        sys.exit(EXIT_CONFIG)

    source = git_output("rev-parse", "--abbrev-ref", "HEAD")
    target = target or main_branch()
    if source == target:
        display.show_error(f"You are on {target}. Please checkout a feature branch")
        sys.exit(EXIT_FAILURE)

    if not no_push:
        display.show_info(f"Pushing branch {source}")
        git_output("push", "--set-upstream", "origin", source)
    head_sha = git_output("rev-parse", "HEAD")

    title = title or git_output("log", "-1", "--format=%s")
    if body is None:
        body = git_output("log", "-1", "--format=%b")

    workflow = MergeRequestWorkflow(provider)
    try:
        available = [label.name for label in provider.list_labels()]
        selected = select_labels(title, available, labels)
        merge_request = workflow.open(
            CreateParams(
                source_branch=source,
                target_branch=target,
                title=title,
                body=body,
                labels=selected,
                squash=squash,
            )
        )
    except LabelError as e:
        display.show_error("Invalid labels", str(e))
        sys.exit(EXIT_CONFIG)
    except CIProviderError as e:
        display.show_error("Could not open merge request", str(e))
        sys.exit(EXIT_FAILURE)

    display.show_success(f"Merge request: {merge_request.web_url}")

    try:
        with display.job_board() as board:
            poller = CompletionPoller(
                provider,
                board,
                poll_interval=config.watch.poll_interval,
                refresh_interval=config.watch.refresh_interval,
            )
            workflow.wait(merge_request, poller, timeout_seconds, fallback_sha=head_sha)
    except PipelineTimeoutError as e:
        logger.warning(str(e))
        sys.exit(EXIT_TIMEOUT)
    except PipelineFailedError as e:
        logger.warning(str(e))
        sys.exit(EXIT_FAILURE)
    except CIProviderError as e:
        display.show_error("CI provider error", str(e))
        sys.exit(EXIT_FAILURE)

    try:
        workflow.merge(merge_request, commit_title=title, squash=squash)
    except CIProviderError as e:
        display.show_error("Merge failed", str(e))
        sys.exit(EXIT_FAILURE)
    display.show_success("Merge request merged")

    if not no_cleanup:
        cleanup_branches(target, source)
    sys.exit(EXIT_SUCCESS)


@cli.command()
@click.option('--remote', '-r', default=None, help='Git remote URL (default: origin)')
def labels(remote: Optional[str]):
    """List the labels available in the repository."""
    display = get_display_manager()
    try:
        config = load_config()
        remote = remote or git_output("remote", "get-url", "origin")
        provider = create_provider(remote, config)
    except (ConfigError, ValueError) as e:
        display.show_error("Configuration error", str(e))
        sys.exit(EXIT_CONFIG)

    try:
        available = provider.list_labels()
    except CIProviderError as e:
        display.show_error("Could not list labels", str(e))
        sys.exit(EXIT_FAILURE)

    console = display.console
    console.print(f"[bold]Available labels for {escape(f'{provider.name}:{remote}')}[/bold]")
    for label in available:
        console.print(f"- {label.name}", markup=False)
    console.print(f"\nTotal: {len(available)} labels")


@cli.command(name="config")
def show_config():
    """Show the resolved configuration."""
    display = get_display_manager()
    path = default_config_path()
    try:
        config = load_config(path)
    except ConfigError as e:
        display.show_error("Configuration error", str(e))
        sys.exit(EXIT_CONFIG)

    console = display.console
    console.print(f"[bold]Config file:[/bold] {path} {'' if path.exists() else '(not found, defaults)'}")
    for name in ("github", "gitlab"):
        section = config.for_platform(name)
        timeout = resolve_pipeline_timeout(None, section)
        console.print(f"\n[bold]{name}[/bold]")
        console.print(f"  assignee:         {section.assignee or '-'}")
        console.print(f"  reviewer:         {section.reviewer or '-'}")
        console.print(f"  pipeline_timeout: {format_duration(timeout)}")
        console.print(f"  api_url:          {section.api_url or 'default'}")
    console.print("\n[bold]watch[/bold]")
    console.print(f"  poll_interval:    {config.watch.poll_interval}s")
    console.print(f"  refresh_interval: {config.watch.refresh_interval}s")


def main():
    """Entry point for the automr CLI."""
    cli()


if __name__ == "__main__":
    main()
