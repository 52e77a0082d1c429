from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table
from rich import box

from .codegen import (
    ConfigError,
    GeneratorError,
    RegistryError,
    create_orchestrator,
    get_generator,
    load_config,
    load_spec,
    save_spec,
)
from .codegen.core.schema import new_template_spec, class_name_from_path
from .commands import Apply, CommandError, EditSession, parse_command
from .logging_config import get_logger

logger = get_logger(__name__)


class CLIHandler:
    """Handle command-line operations on parameter documents."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console instance (creates new if None).
        """
        self.console = console or Console()
        logger.debug("CLIHandler initialized")

    def new(self, args: Any) -> int:
        """Create a template parameter document.

        Args:
            args: Parsed CLI arguments with ``path`` and ``force``.

        Returns:
            Exit code (0 for success, 1 for failure).
        """
        path = Path(args.path)
        if path.exists() and not getattr(args, "force", False):
            self.console.print(f"❌ [red]{path} already exists (use --force)[/red]")
            logger.warning("Refusing to overwrite %s", path)
            return 1

        spec = new_template_spec()
        if getattr(args, "class_name", None):
            spec.class_name = args.class_name
        else:
            spec.class_name = class_name_from_path(path)

        save_spec(path, spec)
        self.console.print(f"✅ [green]Created {path}[/green]")
        logger.info("Created template document %s", path)
        return 0

    def show(self, args: Any) -> int:
        """Print a parameter document as tables."""
        try:
            spec = load_spec(args.path)
        except GeneratorError as e:
            self.console.print(f"❌ [red]{e}[/red]")
            return 1

        self.print_spec(spec, args.path)
        return 0

    def print_spec(self, spec, source: Any) -> None:
        """Render the document fields and parameter rows."""
        fields = Table(title=f"📄 {source}", box=box.SIMPLE, show_header=False)
        fields.add_column("Field", style="bold")
        fields.add_column("Value", style="cyan")
        fields.add_row("Class Name", spec.class_name or "[red]<missing>[/red]")
        fields.add_row("Namespace", spec.namespace or "[dim]none[/dim]")
        fields.add_row("Source Path", spec.source_output_path or "[dim]none[/dim]")
        fields.add_row("Asset Path", spec.asset_output_path or "[dim]none[/dim]")

        params = Table(title="📋 Parameters", box=box.ROUNDED, header_style="bold cyan")
        params.add_column("#", style="dim", justify="right")
        params.add_column("Key", style="bold green")
        params.add_column("Type", style="blue")
        params.add_column("Value")

        for index, entry in enumerate(spec.parameters, 1):
            style = None if entry.is_well_formed() else "dim red"
            params.add_row(
                str(index), entry.key, entry.type, entry.value, style=style
            )

        self.console.print(fields)
        self.console.print(params)

        skipped = spec.malformed_count()
        if skipped:
            self.console.print(
                f"[yellow]⚠️  {skipped} incomplete row(s) will be skipped[/yellow]"
            )

    def edit(self, args: Any) -> int:
        """Run one editing command against a document and save it.

        ``apply`` saves and generates in one step.
        """
        try:
            command = parse_command(args.edit_command)
            orchestrator = None
            if isinstance(command, Apply):
                config = load_config(custom_config={}, config_file=args.config)
                orchestrator = create_orchestrator(get_generator(config=config), config)

            session = EditSession(args.path, orchestrator)
            result = session.execute(command)

        except (CommandError, GeneratorError, RegistryError, ConfigError) as e:
            self.console.print(f"❌ [red]{e}[/red]")
            logger.error("Edit failed: %s", e)
            return 1

        if result is None:
            session.save()
            self.console.print(f"✅ [green]Updated {args.path}[/green]")
            return 0

        if not result.success:
            self.console.print(f"❌ [red]Generation failed: {result.error}[/red]")
            return 1

        self.console.print(f"✅ [green]Wrote {result.source_path}[/green]")
        for warning in result.warnings:
            self.console.print(f"  [yellow]•[/yellow] {warning}", highlight=False)
        if result.pending:
            self.console.print(
                f"⏳ [cyan]Asset {result.pending.destination_path} pending; "
                f"run 'paramgen resume'[/cyan]"
            )
        return 0

    def interactive(self, args: Any) -> int:
        """Start the interactive editor."""
        from .interactive import InteractiveEditor

        try:
            config = load_config(custom_config={}, config_file=args.config)
            orchestrator = create_orchestrator(get_generator(config=config), config)
            session = EditSession(args.path, orchestrator)
        except (GeneratorError, RegistryError, ConfigError) as e:
            self.console.print(f"❌ [red]{e}[/red]")
            return 1

        return 0 if InteractiveEditor(session, self.console).run() else 1


def add_document_subparsers(subparsers, handler: CLIHandler | None = None) -> None:
    """Register the new/show/edit/interactive subcommands."""
    handler = handler or CLIHandler()

    new_parser = subparsers.add_parser("new", help="Create a template parameter document")
    new_parser.add_argument("path", help="Document to create")
    new_parser.add_argument("--class-name", help="Class name (default: file name)")
    new_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    new_parser.set_defaults(func=handler.new)

    show_parser = subparsers.add_parser("show", help="Print a parameter document")
    show_parser.add_argument("path", help="Document path or URL")
    show_parser.set_defaults(func=handler.show)

    edit_parser = subparsers.add_parser(
        "edit",
        help="Apply one editing command to a document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  add KEY [TYPE [VALUE]]   append a parameter
  remove KEY               delete a parameter
  set KEY TYPE VALUE       change a parameter's type and value
  rename KEY NEW_KEY       rename a parameter
  field NAME VALUE         set className, nameSpace, csharpPath or assetPath
  apply                    save and generate
        """.strip(),
    )
    edit_parser.add_argument("path", help="Document path")
    edit_parser.add_argument("edit_command", nargs=argparse.REMAINDER, help="Command words")
    edit_parser.add_argument("--config", help="Configuration file path (JSON)")
    edit_parser.set_defaults(func=handler.edit)

    interactive_parser = subparsers.add_parser(
        "interactive", help="Edit a document interactively"
    )
    interactive_parser.add_argument("path", help="Document path")
    interactive_parser.add_argument("--config", help="Configuration file path (JSON)")
    interactive_parser.set_defaults(func=handler.interactive)
