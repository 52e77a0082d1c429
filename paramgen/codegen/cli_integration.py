"""
CLI integration for code generation functionality.

Provides the ``generate`` and ``resume`` subcommands and the language
listing options.
"""

import argparse
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from . import (
    generate_code,
    get_generator,
    get_language_info,
    list_all_language_info,
    list_supported_languages,
    create_orchestrator,
    load_config,
    load_spec,
    GeneratorConfig,
    GeneratorError,
    ResumeStatus,
    RegistryError,
)
from .core.config import ConfigError, get_config_manager
from .registry import is_language_supported
from ..logging_config import get_logger

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()

RESUME_MESSAGES = {
    ResumeStatus.IDLE: "[dim]No pending instantiation[/dim]",
    ResumeStatus.WAITING: "[yellow]⏳ Build still running; run 'paramgen resume' later[/yellow]",
    ResumeStatus.CREATED: "[green]✓[/green] Asset created",
    ResumeStatus.NOT_FOUND: "[red]✗ Generated type not found; pending request cleared[/red]",
    ResumeStatus.FAILED: "[red]✗ Asset could not be written; pending request cleared[/red]",
}


def add_codegen_args(parser: argparse.ArgumentParser):
    """Add language listing arguments to the main parser."""
    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported target languages and exit",
    )
    info_group.add_argument(
        "--language-info",
        metavar="LANGUAGE",
        help="Show detailed information about a specific language",
    )


def _add_pipeline_args(parser: argparse.ArgumentParser):
    """Options shared by generate and resume."""
    parser.add_argument("--config", help="Configuration file path (JSON)")
    parser.add_argument(
        "--state-file", help="Pending instantiation record (default: .paramgen/pending.json)"
    )
    parser.add_argument(
        "--build-command", help="Command that compiles the generated sources"
    )
    parser.add_argument(
        "--type-root",
        action="append",
        dest="type_roots",
        metavar="DIR",
        help="Directory scanned for compiled types (repeatable)",
    )
    parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the build and create the asset before exiting",
    )
    parser.add_argument(
        "--timeout", type=float, help="Seconds to wait for the build (with --wait)"
    )


def create_codegen_subparser(subparsers) -> argparse.ArgumentParser:
    """
    Create the ``generate`` subcommand parser.

    Args:
        subparsers: Subparser group from main parser

    Returns:
        Configured subparser for the generate command
    """
    parser = subparsers.add_parser(
        "generate",
        help="Generate a class from a parameter document",
        description="Generate source code (and optionally an asset) from a parameter document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  paramgen generate params.json
  paramgen generate params.json -o Assets/Scripts/Stats.cs --asset Assets/Stats.asset --wait
  paramgen generate params.json --class-kind static_readonly --stdout
        """.strip(),
    )

    parser.add_argument("file", help="Parameter document (path or URL)")
    parser.add_argument("--language", "-l", default="csharp", help="Target language")
    parser.add_argument("--output", "-o", help="Source output path (overrides csharpPath)")
    parser.add_argument("--asset", help="Asset output path (overrides assetPath)")
    parser.add_argument(
        "--class-kind",
        choices=["scriptable_object", "plain", "static_readonly"],
        help="Declaration shape of the generated class",
    )
    parser.add_argument("--indent-size", type=int, help="Spaces per indentation level")
    parser.add_argument("--use-tabs", action="store_true", help="Indent with tabs")
    parser.add_argument(
        "--comments", action="store_true", help="Add an auto-generated header comment"
    )
    parser.add_argument(
        "--pending-policy",
        choices=["overwrite", "reject"],
        help="What to do when an earlier instantiation is still pending",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the generated code instead of writing files",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Show generation result metadata"
    )
    _add_pipeline_args(parser)

    parser.set_defaults(func=_handle_generate)
    return parser


def create_resume_subparser(subparsers) -> argparse.ArgumentParser:
    """Create the ``resume`` subcommand parser."""
    parser = subparsers.add_parser(
        "resume",
        help="Finish a pending asset instantiation",
        description="Instantiate the generated type recorded by an earlier generate",
    )
    parser.add_argument("--language", "-l", default="csharp", help="Target language")
    _add_pipeline_args(parser)

    parser.set_defaults(func=_handle_resume)
    return parser


def handle_codegen_command(args: argparse.Namespace) -> int:
    """
    Handle the informational options.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if getattr(args, "list_languages", False):
        return _list_languages()

    if getattr(args, "language_info", None):
        return _show_language_info(args.language_info)

    return 0


def _handle_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    try:
        if not _validate_language(args.language):
            return 1

        config = _build_config(args)
        generator = get_generator(args.language, config)

        if args.stdout:
            return _preview(generator, args)

        orchestrator = create_orchestrator(generator, config)
        result = orchestrator.apply(args.file, args.output, args.asset)

        if not result.success:
            console.print(f"[red]✗ Code generation failed:[/red] {result.error}")
            return 1

        console.print(
            f"[green]✓[/green] Generated {args.language} code saved to "
            f"[cyan]{result.source_path}[/cyan]"
        )
        _print_warnings(result.warnings)

        if args.verbose:
            _print_metadata(
                {
                    "source_path": result.source_path,
                    "pending_asset": result.pending.destination_path
                    if result.pending
                    else "none",
                    "class_kind": config.class_kind,
                }
            )

        if result.pending is None:
            return 0

        console.print(
            f"[cyan]⏳ Asset {result.pending.destination_path} will be created "
            f"after the build[/cyan]"
        )
        if args.wait:
            return _wait(orchestrator, args)
        return 0

    except (CLIError, ConfigError, GeneratorError, RegistryError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _handle_resume(args: argparse.Namespace) -> int:
    """Handle the resume subcommand."""
    try:
        config = _build_config(args)
        generator = get_generator(args.language, config)
        orchestrator = create_orchestrator(generator, config)

        if args.wait:
            return _wait(orchestrator, args)

        status = orchestrator.resume()
        console.print(RESUME_MESSAGES[status])
        return 1 if status in (ResumeStatus.NOT_FOUND, ResumeStatus.FAILED) else 0

    except (CLIError, ConfigError, GeneratorError, RegistryError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _wait(orchestrator, args: argparse.Namespace) -> int:
    """Poll the orchestrator until the asset step finishes."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("[cyan]Waiting for build...", total=None)
        status = orchestrator.wait_for_completion(timeout=args.timeout)

    console.print(RESUME_MESSAGES[status])
    return 1 if status in (ResumeStatus.NOT_FOUND, ResumeStatus.FAILED) else 0


def _preview(generator, args: argparse.Namespace) -> int:
    """Print generated code with syntax highlighting, writing nothing."""
    spec = load_spec(args.file)
    result = generate_code(generator, spec)

    if not result.success:
        console.print(f"[red]✗ Code generation failed:[/red] {result.error_message}")
        return 1

    console.print(Syntax(result.code, "csharp", theme="monokai"))

    _print_warnings(result.warnings)
    if args.verbose:
        _print_metadata(result.metadata)
    return 0


def _print_warnings(warnings):
    if not warnings:
        return
    console.print("\n[yellow]⚠️  Warnings:[/yellow]")
    for warning in warnings:
        console.print(f"  [yellow]•[/yellow] {warning}", highlight=False)
    console.print()


def _key_value_table(title: str, rows, value_style: str = "green") -> Table:
    table = Table(title=title, box=box.SIMPLE, header_style="bold cyan")
    table.add_column("Setting", style="bold")
    table.add_column("Value", style=value_style)
    for name, value in rows:
        table.add_row(name, str(value))
    return table


def _print_metadata(metadata):
    rows = [(key.replace("_", " ").title(), value) for key, value in metadata.items()]
    console.print()
    console.print(_key_value_table("📊 Generation Metadata", rows))


def _list_languages() -> int:
    """List supported languages with details."""
    languages = list_all_language_info()
    if not languages:
        console.print("[yellow]⚠️ No code generators available[/yellow]")
        return 0

    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Aliases", style="blue")
    for name in sorted(languages):
        info = languages[name]
        table.add_row(name, info["file_extension"], ", ".join(info["aliases"]) or "[dim]none[/dim]")

    console.print()
    console.print(table)
    console.print(
        "\n[dim]Generate with[/dim] paramgen generate params.json --language LANGUAGE"
    )
    return 0


def _show_language_info(language: str) -> int:
    """Show generator details and default settings for one language."""
    if not _validate_language(language, silent=True):
        console.print(f"[red]✗ Language '{language}' is not supported[/red]")
        console.print("[dim]Use --list-languages to see available options[/dim]")
        return 1

    info = get_language_info(language)
    lines = [
        f"[bold]Language:[/bold] {info['name']}",
        f"[bold]File Extension:[/bold] {info['file_extension']}",
        f"[bold]Generator:[/bold] {info['class']}",
        f"[bold]Module:[/bold] {info['module']}",
    ]
    if info["aliases"]:
        lines.append(f"[bold]Aliases:[/bold] {', '.join(info['aliases'])}")
    console.print()
    console.print(Panel("\n".join(lines), title=f"🔧 {info['name']}", border_style="green"))

    config = get_generator(language).config
    defaults = [
        ("Class Kind", config.class_kind),
        ("Indent Size", config.indent_size),
        ("Usings", ", ".join(config.usings)),
        ("State File", config.state_file),
        ("Pending Policy", config.pending_policy),
    ]
    console.print(_key_value_table("⚙️  Default Configuration", defaults))
    return 0


def _validate_language(language: str, silent: bool = False) -> bool:
    """Validate that a language is supported."""
    if is_language_supported(language):
        return True
    if not silent:
        console.print(f"[red]✗ Unsupported language '{language}'[/red]")
        console.print(
            f"[dim]Supported languages: {', '.join(list_supported_languages())}[/dim]"
        )
    return False


# argparse dest -> GeneratorConfig field, for options that override config
_CONFIG_OPTIONS = {
    "class_kind": "class_kind",
    "indent_size": "indent_size",
    "use_tabs": "use_tabs",
    "comments": "add_comments",
    "pending_policy": "pending_policy",
    "state_file": "state_file",
    "build_command": "build_command",
    "type_roots": "type_roots",
}


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Merge the config file with whichever options were given on the command line."""
    overrides = {
        key: getattr(args, dest)
        for dest, key in _CONFIG_OPTIONS.items()
        if getattr(args, dest, None)
    }

    try:
        config = load_config(
            getattr(args, "language", "csharp"),
            custom_config=overrides,
            config_file=getattr(args, "config", None),
        )
    except (ConfigError, TypeError) as e:
        raise CLIError(f"Configuration error: {e}") from e

    for warning in get_config_manager().validate_config(config):
        logger.warning(warning)

    return config
