#!/usr/bin/env python3
"""
Vibe Shield CLI - Command-line interface
Click-based CLI that scans a project and prints fix instructions for AI agents
"""

import sys
from pathlib import Path
from typing import Dict

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vibeshield import __version__, scan_directory
from vibeshield.config import ConfigManager
from vibeshield.core.aggregator import ScanResult
from vibeshield.core.reporter import format_agent_prompt, format_json, write_json_report
from vibeshield.ide import init_cursor_rules
from vibeshield.rules import RuleLoadError, Severity, load_default_registry

# Force UTF-8 encoding for stdout/stderr on Windows so the box-drawing
# characters in the agent transcript survive cp1252 terminals
if sys.platform == 'win32':
    import io
    if isinstance(sys.stdout, io.TextIOWrapper):
        sys.stdout.reconfigure(encoding='utf-8', errors='replace')
    if isinstance(sys.stderr, io.TextIOWrapper):
        sys.stderr.reconfigure(encoding='utf-8', errors='replace')

console = Console()
err_console = Console(stderr=True)

SEVERITY_STYLES: Dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}

# Internal failure: rule table broken, bad configuration, report not writable
EXIT_INTERNAL_ERROR = 2


class VibeShieldGroup(click.Group):
    """Command group that treats `vibeshield ./src` as `vibeshield scan ./src`"""

    def resolve_command(self, ctx, args):
        if args and args[0] not in self.commands and args[0].startswith(('.', '/')):
            args = ['scan'] + list(args)
        return super().resolve_command(ctx, args)


def print_banner():
    """Print Vibe Shield banner with fallback for Windows encoding issues"""
    banner = Panel.fit(
        f"[bold magenta]Vibe Shield v{__version__}[/bold magenta]\n"
        "[dim]Security scanner for AI-generated code[/dim]",
        border_style="magenta",
    )
    try:
        console.print(banner)
    except UnicodeEncodeError:
        # Terminals that cannot draw the panel border
        click.echo(f"\nVibe Shield v{__version__}\n")


def _print_summary(result: ScanResult):
    """Print per-rule and per-severity counts"""
    console.print("\n[bold]By type:[/bold]")
    for name, count in result.by_name.items():
        console.print(f"  • {name}: {count}", markup=False, highlight=False)

    console.print("\n[bold]By severity:[/bold]")
    for severity in Severity.ordered():
        count = result.by_severity[severity.value]
        if count:
            style = SEVERITY_STYLES[severity]
            console.print(f"  [{style}]{severity.value.upper()}[/{style}]: {count}")


@click.group(cls=VibeShieldGroup, invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version and exit')
@click.pass_context
def main(ctx, version):
    """
    Vibe Shield - Security Scanner for AI-Generated Code

    Finds hardcoded secrets, injection sinks and unsafe settings, and prints
    fix instructions your coding agent can act on.

    Examples:
        vibeshield                    # Scan current directory
        vibeshield ./src              # Scan a specific directory
        vibeshield scan --format json # Machine-readable report
        vibeshield init               # Add rules to .cursorrules
    """
    if version:
        click.echo(f"Vibe Shield v{__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        ctx.invoke(scan)


@main.command()
@click.argument('target', type=click.Path(exists=True), default='.')
@click.option('--format', 'output_format', type=click.Choice(['agent', 'json']),
              default='agent', help='agent: fix instructions for AI agents, json: structured report')
@click.option('-o', '--output', type=click.Path(dir_okay=False), default=None,
              help='Also write the JSON report to this file')
@click.option('-w', '--workers', type=int, default=None,
              help='Number of worker processes (default: from config, 1)')
@click.option('--fail-on', type=click.Choice(['critical', 'high', 'medium', 'low']),
              default=None, help='Exit with code 1 if issues at this level or higher are found')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='Path to .vibeshield.yml (default: search upward from target)')
@click.option('--no-banner', is_flag=True, help='Do not print the banner')
@click.option('--progress', is_flag=True, help='Show a progress bar on stderr')
def scan(target, output_format, output, workers, fail_on, config_path, no_banner, progress):
    """
    Scan a directory or file for security issues.

    Exit code is 0 when nothing at or above the fail-on level is found,
    1 when issues are found, 2 when the scan itself could not run.

    Examples:
        vibeshield scan .                  # Scan current directory
        vibeshield scan src/app.js         # Scan a single file
        vibeshield scan --fail-on high .   # Only fail on HIGH+ issues
        vibeshield scan --format json -o report.json
    """
    target_path = Path(target)
    config = ConfigManager.load_config(
        config_path=Path(config_path) if config_path else None,
        start_path=target_path,
    )

    try:
        threshold = Severity((fail_on or config.fail_on).lower())
    except ValueError:
        err_console.print(f"✗ Invalid fail_on level: {fail_on or config.fail_on}",
                          style="red", markup=False)
        sys.exit(EXIT_INTERNAL_ERROR)

    try:
        registry = load_default_registry(config.extra_rule_files)
    except RuleLoadError as e:
        err_console.print(f"✗ Failed to load rules: {e}", style="red", markup=False)
        sys.exit(EXIT_INTERNAL_ERROR)

    agent_mode = output_format == 'agent'
    if agent_mode:
        if not no_banner:
            print_banner()
        console.print(f"[cyan]Target:[/cyan] {target_path}", highlight=False)

    result = scan_directory(
        target_path,
        config=config,
        registry=registry,
        workers=workers if workers is not None else config.workers,
        show_progress=progress,
    )

    if output:
        try:
            report_path = write_json_report(result, Path(output))
        except OSError as e:
            err_console.print(f"✗ Failed to write report: {e}", style="red", markup=False)
            sys.exit(EXIT_INTERNAL_ERROR)
        if agent_mode:
            console.print(f"[dim]JSON report written to {report_path}[/dim]", highlight=False)

    if not agent_mode:
        click.echo(format_json(result.issues, result.warnings))
        sys.exit(result.exit_code(threshold))

    if result.total == 0:
        console.print(
            f"\n[bold green]✓ SAFE[/bold green] - No security issues found "
            f"({result.files_scanned} files scanned)"
        )
    else:
        console.print(f"\n[bold red]✗ Found {result.total} security issue(s)[/bold red]")
        _print_summary(result)

    transcript = format_agent_prompt(result.issues, result.warnings)
    if transcript:
        console.print()
        console.print(transcript, markup=False, highlight=False, soft_wrap=True)

    sys.exit(result.exit_code(threshold))


@main.command()
@click.argument('target', type=click.Path(exists=True, file_okay=False), default='.')
@click.option('--with-config', is_flag=True, help='Also create a default .vibeshield.yml')
def init(target, with_config):
    """
    Add Vibe Shield instructions to .cursorrules.

    The agent is told to run a scan before marking a task done and to
    follow the [INSTRUCTION] lines in the output.

    Examples:
        vibeshield init                # Current project
        vibeshield init --with-config  # Also write .vibeshield.yml
    """
    project_root = Path(target)
    result = init_cursor_rules(project_root)

    if result.success:
        console.print(f"[green]✓[/green] {result.message}")
    else:
        err_console.print(f"✗ {result.message}", style="yellow", markup=False)

    if with_config:
        config_file = project_root / ConfigManager.DEFAULT_CONFIG_NAME
        if config_file.exists():
            console.print(f"[dim]{ConfigManager.DEFAULT_CONFIG_NAME} already exists, left unchanged[/dim]")
        elif ConfigManager.create_default_config(project_root).exists():
            console.print(f"[green]✓[/green] {ConfigManager.DEFAULT_CONFIG_NAME} created")
        else:
            sys.exit(1)

    if not result.success:
        sys.exit(1)


@main.command()
@click.option('--severity', type=click.Choice(['critical', 'high', 'medium', 'low']),
              default=None, help='Only show rules of this severity')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='Path to .vibeshield.yml (default: search upward from current directory)')
def rules(severity, config_path):
    """
    List the detection rules a scan would apply.

    Includes extra rule files named in .vibeshield.yml.

    Examples:
        vibeshield rules                  # All rules
        vibeshield rules --severity high  # HIGH rules only
    """
    config = ConfigManager.load_config(config_path=Path(config_path) if config_path else None)
    try:
        registry = load_default_registry(config.extra_rule_files)
    except RuleLoadError as e:
        err_console.print(f"✗ Failed to load rules: {e}", style="red", markup=False)
        sys.exit(EXIT_INTERNAL_ERROR)

    selected = registry.by_severity(Severity(severity)) if severity else list(registry)

    table = Table(title="Vibe Shield Rules", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Severity")
    table.add_column("Category", style="magenta")

    for rule in selected:
        style = SEVERITY_STYLES[rule.severity]
        table.add_row(rule.id, rule.name,
                      f"[{style}]{rule.severity.value.upper()}[/{style}]", rule.category)

    console.print(table)
    console.print(f"\n[bold]Total: {len(selected)} rules[/bold]")


@main.command()
def version():
    """Show version and exit"""
    click.echo(f"Vibe Shield v{__version__}")


@main.command(name='help')
@click.pass_context
def help_command(ctx):
    """Show this message and exit"""
    click.echo(ctx.parent.get_help())


if __name__ == '__main__':
    main()
