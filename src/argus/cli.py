"""Command-line interface for Argus."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from argus import __version__
from argus.config import (
    AnalyzerKind,
    ConfigurationError,
    ReviewConfig,
    get_strictness_policy,
    load_config,
    validate_config,
)
from argus.models.findings import Severity
from argus.models.review import FinalReview
from argus.review import review_pull_request

console = Console()
# Logs go to stderr so --output json stays parseable
log_console = Console(stderr=True)

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=log_console, rich_tracebacks=True)],
    )


def _load_valid_config(config_path: str | None) -> ReviewConfig:
    """Load configuration, exiting with status 1 when it is invalid."""
    try:
        config = load_config(Path(config_path) if config_path else None)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Config error:[/red] {e}")
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        for error in errors:
            console.print(f"[red]Config error:[/red] {error}")
        sys.exit(1)
    return config


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """Argus - multi-analyzer code review orchestrator."""
    setup_logging(verbose)


@cli.command("review-pr")
@click.argument("repo")
@click.argument("pr_number", type=int)
@click.option("--output", type=click.Choice(["json", "table"]), default="table")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def review_pr(repo: str, pr_number: int, output: str, config_path: str | None) -> None:
    """Review a GitHub pull request with every active analyzer."""
    config = _load_valid_config(config_path)

    if output == "table":
        console.print(f"🔍 Reviewing PR #{pr_number} in [bold]{repo}[/bold]...")

    try:
        outcome = asyncio.run(review_pull_request(repo, pr_number, config))
    except ConfigurationError as e:
        console.print(f"[red]Config error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    review = outcome.final_review
    if output == "json":
        data = review.to_dict()
        data["agent_weights"] = outcome.agent_weights
        print(json.dumps(data, indent=2))
    else:
        print_review(review)
        if config.learning_mode and outcome.agent_weights != config.agent_weights:
            weights = ", ".join(f"{k}={v:g}" for k, v in outcome.agent_weights.items())
            console.print(f"[dim]Updated agent weights: {weights}[/dim]")

    if review.failed_agents and output == "table":
        console.print(
            f"[yellow]⚠️  {len(review.failed_agents)} analyzers failed: "
            f"{', '.join(review.failed_agents)}[/yellow]"
        )

    if review.has_blocking_issues:
        sys.exit(2)


def print_review(review: FinalReview) -> None:
    """Render a final review as rich tables."""
    console.print(f"\n{review.summary}\n")

    for title, issues in (
        ("Blocking Issues", review.blocking_issues),
        ("Recommendations", review.recommendations),
    ):
        if not issues:
            continue

        table = Table(title=title)
        table.add_column("Severity")
        table.add_column("Location")
        table.add_column("Title")
        table.add_column("Analyzer")

        for issue in issues:
            location = f"{issue.file}:{issue.line}" if issue.line else issue.file
            table.add_row(
                f"[{SEVERITY_STYLES[issue.severity]}]{issue.severity.value}[/]",
                location,
                issue.title,
                issue.source.agent if issue.source else "",
            )

        console.print(table)

    if review.coaching:
        console.print("\n[bold]Coaching[/bold]")
        for coaching in review.coaching:
            console.print(f"  • {coaching.best_practice} [dim]({coaching.level})[/dim]")

    metrics = review.metrics
    console.print(
        f"\nFiles: {metrics.files_reviewed} | Issues: {metrics.issues_found} | "
        f"Time: {metrics.execution_time_ms / 1000:.1f}s"
    )


@cli.group("config")
def config_group() -> None:
    """Configuration commands."""
    pass


@config_group.command("validate")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_validate(config_path: str | None) -> None:
    """Validate configuration file."""
    try:
        config = load_config(Path(config_path) if config_path else None)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        console.print("[red]Configuration is invalid:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        sys.exit(1)

    console.print("[green]✓ Configuration is valid[/green]")


@config_group.command("show")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_show(config_path: str | None) -> None:
    """Show current configuration."""
    config = _load_valid_config(config_path)
    policy = get_strictness_policy(config.strictness_level)

    console.print("\n[bold]Current Configuration[/bold]\n")

    table = Table(title="Analyzers")
    table.add_column("Analyzer")
    table.add_column("Weight", justify="right")
    table.add_column("Active")

    for kind in AnalyzerKind:
        active = "[green]yes[/green]" if config.is_enabled(kind) else "[dim]no[/dim]"
        table.add_row(kind.value, f"{config.weight_for(kind):g}", active)

    console.print(table)

    console.print(f"\n[bold]Strictness:[/bold] {config.strictness_level}")
    console.print(
        f"[bold]Blocking:[/bold] {'yes' if policy.block_on_issues else 'no'} "
        f"(threshold {policy.severity_threshold.value})"
    )
    console.print(f"[bold]Learning mode:[/bold] {'on' if config.learning_mode else 'off'}")
    console.print(f"[bold]Coaching:[/bold] {'on' if config.enable_coaching else 'off'}")
    console.print(
        f"[bold]Concurrency:[/bold] {config.orchestrator.concurrency} | "
        f"[bold]Retries:[/bold] {config.orchestrator.max_retries}"
    )
    console.print(f"[bold]Model:[/bold] {config.model.model} ({config.model.base_url})")


if __name__ == "__main__":
    cli()
