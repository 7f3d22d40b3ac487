"""
Compliance Scanner CLI Interface
Command-line interface for evaluating cloud inventories against compliance rules
"""

import sys
import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .core.config import ENV_PREFIX, SOURCES, ScanConfig
from .core.engine import ComplianceEvaluator, ScanResult
from .core.exceptions import ComplianceScannerError, ReportError
from .core.output import DEFAULT_REPORT_FILE, OutputEngine
from .core.provider import create_provider
from .core.registry import RuleRegistry
from .core.report import filter_non_compliant


console = Console()

EXIT_CLEAN = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2

SEVERITY_STYLES = {
    "CRITICAL": "bold red",
    "HIGH": "red",
    "MEDIUM": "yellow",
    "LOW": "green",
}


def _env(name: str) -> str:
    return f"{ENV_PREFIX}_{name}"


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """Cloud Asset Compliance Scanner"""
    ctx.ensure_object(dict)

    # Configure logging
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Reduce noise from boto3
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


@cli.command()
@click.option('--source', type=click.Choice(SOURCES), default='mock', show_default=True,
              envvar=_env('SOURCE'), help='Inventory source')
@click.option('--inventory', '-i', type=click.Path(dir_okay=False), envvar=_env('INVENTORY'),
              help='JSON inventory file (json source)')
@click.option('--region', default='us-east-1', envvar=_env('REGION'), help='AWS region (aws source)')
@click.option('--profile', envvar=_env('PROFILE'), help='AWS profile to use (aws source)')
@click.option('--rules', '-r', multiple=True, help='Only run these rule ids')
@click.option('--exclude-rules', multiple=True, help='Rule ids to skip')
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=DEFAULT_REPORT_FILE,
              show_default=True, envvar=_env('OUTPUT'), help='Report file path')
@click.option('--parallel/--no-parallel', default=False, envvar=_env('PARALLEL'),
              help='Evaluate assets in parallel')
@click.option('--max-workers', type=int, default=5, envvar=_env('MAX_WORKERS'),
              help='Maximum parallel workers')
@click.option('--strict/--lenient', default=True, envvar=_env('STRICT'),
              help='Abort on malformed assets (strict) or report and skip them (lenient)')
@click.option('--quiet', '-q', is_flag=True, help='Only print per-asset summary lines')
def scan(source, inventory, region, profile, rules, exclude_rules, output,
         parallel, max_workers, strict, quiet):
    """Evaluate an asset inventory and write the compliance report"""

    try:
        config = ScanConfig(
            source=source,
            inventory_file=inventory,
            region=region,
            profile=profile,
            rule_ids=list(rules),
            excluded_rules=list(exclude_rules),
            output_file=output,
            parallel=parallel,
            max_workers=max_workers,
            strict=strict,
        )
        selected_rules = RuleRegistry().select(config.rule_ids, config.excluded_rules)
    except ComplianceScannerError as e:
        console.print(f"[red]❌ Invalid configuration: {escape(str(e))}[/red]")
        sys.exit(EXIT_ERROR)

    if not quiet:
        console.print("[bold blue]🛡️ Cloud Asset Compliance Scanner[/bold blue]")
        console.print(f"[dim]Inventory source: {config.source} | "
                      f"Rules: {', '.join(rule.rule_id for rule in selected_rules) or 'none'}[/dim]")

    try:
        provider = create_provider(config)
        assets = provider.fetch_assets()
        evaluator = ComplianceEvaluator(
            selected_rules,
            strict=config.strict,
            parallel=config.parallel,
            max_workers=config.max_workers,
        )
        result = evaluator.evaluate_all(assets)
    except ComplianceScannerError as e:
        console.print(f"[red]❌ Scan failed: {escape(str(e))}[/red]")
        sys.exit(EXIT_ERROR)

    result.errors = list(getattr(provider, 'rejected', [])) + result.errors

    # Scores are valid even if the report cannot be persisted
    for asset in result.assets:
        click.echo(OutputEngine.format_summary_line(asset))

    if not quiet:
        _display_summary(result)

    failed = filter_non_compliant(result.assets)
    try:
        outcome = OutputEngine.save_report(failed, config.output_file)
    except ReportError as e:
        console.print(f"[red]❌ Could not write report: {escape(str(e))}[/red]")
        sys.exit(EXIT_ERROR)

    if outcome.is_clean:
        console.print("[green]No compliance failures found. Clean run![/green]")
    else:
        console.print(f"[green]✅ Detailed report for {outcome.asset_count} failed assets "
                      f"written to: {outcome.path}[/green]")

    if result.errors:
        sys.exit(EXIT_ERROR)
    sys.exit(EXIT_CLEAN if outcome.is_clean else EXIT_VIOLATIONS)


def _display_summary(result: ScanResult):
    """Display scan summary in rich format"""
    summary = result.summary()

    table = Table(title="📊 Scan Summary", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="green", width=10)

    table.add_row("Assets Evaluated", str(summary['total_assets']))
    table.add_row("Passed", str(summary['passed']))
    table.add_row("Failed", str(summary['failed']))
    table.add_row("Violations", str(summary['total_violations']))
    table.add_row("Rejected Records", str(summary['errors']))

    console.print(table)

    if summary['by_severity']:
        severity_table = Table(title="🎯 Violations by Severity", show_header=True,
                               header_style="bold red")
        severity_table.add_column("Severity", style="cyan")
        severity_table.add_column("Count", style="magenta")

        for severity, count in summary['by_severity'].items():
            style = SEVERITY_STYLES.get(severity, "")
            severity_table.add_row(f"[{style}]{severity}[/{style}]", str(count))

        console.print(severity_table)

    for error in result.errors:
        console.print(f"[yellow]⚠️ Rejected {escape(error.asset_id)}: {escape(error.message)}[/yellow]")


@cli.command('list-rules')
def list_rules():
    """List all registered compliance rules"""
    registry = RuleRegistry()

    table = Table(title="Available Compliance Rules", show_header=True, header_style="bold blue")
    table.add_column("Rule ID", style="cyan")
    table.add_column("Severity")
    table.add_column("Penalty", justify="right")
    table.add_column("Applies To", style="dim")
    table.add_column("Title")

    for rule in registry.get_all_rules():
        style = SEVERITY_STYLES.get(rule.severity.value, "")
        applies_to = ", ".join(t.value for t in rule.asset_types) or "ALL"
        table.add_row(rule.rule_id, f"[{style}]{rule.severity.value}[/{style}]",
                      str(rule.penalty), applies_to, rule.title)

    console.print(table)


def main():
    """Main CLI entry point"""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️ Scan interrupted by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
