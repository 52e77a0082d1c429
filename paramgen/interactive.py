"""
Interactive parameter document editor.

"""

from typing import Optional

from rich.console import Console
from rich.prompt import Prompt, Confirm
from rich.panel import Panel
from rich.syntax import Syntax

from .codegen import GeneratorError, generate_code
from .codegen.core.schema import SUPPORTED_TYPE_NAMES, TypeTag
from .codegen.languages.csharp.converter import (
    format_vector,
    is_number,
    parse_vector,
    vector_size,
)
from .commands import (
    AddParameter,
    CommandError,
    EditSession,
    RemoveParameter,
    SetField,
    SetParameter,
)
from .cli import CLIHandler
from .logging_config import get_logger

logger = get_logger(__name__)


class InteractiveEditor:
    """Menu-driven editor over an :class:`EditSession`."""

    def __init__(self, session: EditSession, console: Console = None):
        """
        Initialize the editor.

        Args:
            session: Session holding the document being edited
            console: Rich console instance (creates new if None)
        """
        self.session = session
        self.console = console or Console()
        self._printer = CLIHandler(self.console)

    def run(self) -> bool:
        """
        Run the editor loop.

        Returns:
            True on a normal quit, False if cancelled
        """
        try:
            while True:
                action = self._show_main_menu()

                if action == "quit":
                    return self._quit()
                elif action == "list":
                    self._printer.print_spec(self.session.spec, self.session.spec_path)
                elif action == "add":
                    self._add_parameter()
                elif action == "edit":
                    self._edit_parameter()
                elif action == "remove":
                    self._remove_parameter()
                elif action == "fields":
                    self._edit_fields()
                elif action == "preview":
                    self._preview()
                elif action == "save":
                    self.session.save()
                    self.console.print(f"[green]✅ Saved {self.session.spec_path}[/green]")
                elif action == "apply":
                    self._apply()
                elif action == "revert":
                    self._revert()

        except KeyboardInterrupt:
            self.console.print("\n[yellow]👋 Editing cancelled[/yellow]")
            return False

    def _show_main_menu(self) -> str:
        """Show the main menu and get user choice."""
        dirty = " [yellow](unsaved)[/yellow]" if self.session.dirty else ""
        menu_panel = Panel.fit(
            """[bold blue]📝 Parameter Editor[/bold blue]

[cyan]1.[/cyan] 📋 List Parameters
[cyan]2.[/cyan] ➕ Add Parameter
[cyan]3.[/cyan] ✏️  Edit Parameter
[cyan]4.[/cyan] ➖ Remove Parameter
[cyan]5.[/cyan] 🏷️  Class Fields
[cyan]6.[/cyan] 👀 Preview Code
[cyan]7.[/cyan] 💾 Save
[cyan]8.[/cyan] 🚀 Apply
[cyan]r.[/cyan] ↩️  Revert
[cyan]q.[/cyan] 🚪 Quit""",
            border_style="blue",
            title=f"📄 {self.session.spec_path}{dirty}",
        )

        self.console.print()
        self.console.print(menu_panel)

        choice = Prompt.ask(
            "\n[bold]Choose an option[/bold]",
            choices=["1", "2", "3", "4", "5", "6", "7", "8", "r", "q"],
            default="1",
        )

        choice_map = {
            "1": "list",
            "2": "add",
            "3": "edit",
            "4": "remove",
            "5": "fields",
            "6": "preview",
            "7": "save",
            "8": "apply",
            "r": "revert",
            "q": "quit",
        }

        return choice_map.get(choice, "quit")

    def _run(self, command) -> None:
        try:
            self.session.execute(command)
        except CommandError as e:
            self.console.print(f"[red]❌ {e}[/red]")

    def _add_parameter(self):
        key = Prompt.ask("Key")
        type_name = Prompt.ask("Type", choices=SUPPORTED_TYPE_NAMES, default="float")
        value = self._prompt_value(type_name)
        self._run(AddParameter(key, type_name, value))

    def _select_parameter(self) -> Optional[str]:
        keys = [entry.key for entry in self.session.spec.parameters]
        if not keys:
            self.console.print("[yellow]No parameters yet[/yellow]")
            return None
        return Prompt.ask("Parameter", choices=keys)

    def _edit_parameter(self):
        key = self._select_parameter()
        if key is None:
            return

        entry = self.session.spec.get_parameter(key)
        new_key = Prompt.ask("Key", default=entry.key)
        type_name = Prompt.ask(
            "Type",
            choices=SUPPORTED_TYPE_NAMES,
            default=entry.type if entry.type in SUPPORTED_TYPE_NAMES else "float",
        )
        value = self._prompt_value(type_name, entry.value)

        self._run(
            SetParameter(
                key,
                type=type_name,
                value=value,
                new_key=new_key if new_key != key else None,
            )
        )

    def _remove_parameter(self):
        key = self._select_parameter()
        if key is None:
            return
        if Confirm.ask(f"Remove '{key}'?", default=False):
            self._run(RemoveParameter(key))

    def _edit_fields(self):
        spec = self.session.spec
        source = Prompt.ask("Source output path", default=spec.source_output_path)
        sync = source != spec.source_output_path and Confirm.ask(
            "Use the file name as the class name?", default=True
        )
        self._run(SetField("source_output_path", source, sync_class_name=sync))

        self._run(SetField("class_name", Prompt.ask("Class name", default=spec.class_name)))
        self._run(SetField("namespace", Prompt.ask("Namespace", default=spec.namespace)))
        self._run(
            SetField(
                "asset_output_path",
                Prompt.ask("Asset output path", default=spec.asset_output_path),
            )
        )

    def _prompt_value(self, type_name: str, default: str = "") -> str:
        """Ask for a value until it fits the type; vectors are normalised."""
        tag = TypeTag.parse(type_name)
        size = vector_size(type_name)

        while True:
            raw = Prompt.ask("Value", default=default or None) or ""

            if size is not None:
                values = parse_vector(raw, size)
                if values is not None:
                    return format_vector(values)
                self.console.print(f"[red]Expected {size} comma-separated numbers[/red]")
            elif tag in (TypeTag.FLOAT, TypeTag.INT):
                if is_number(raw, integral=tag == TypeTag.INT):
                    return raw
                self.console.print(f"[red]'{raw}' is not a valid {type_name}[/red]")
            else:
                return raw

    def _preview(self):
        generator = self.session.orchestrator.generator
        result = generate_code(generator, self.session.spec)

        if not result.success:
            self.console.print(f"[red]❌ {result.error_message}[/red]")
            return

        self.console.print(
            Panel(
                Syntax(result.code, "csharp", theme="monokai"),
                title=f"👀 {result.metadata.get('qualified_name')}",
                border_style="green",
            )
        )
        for warning in result.warnings:
            self.console.print(f"  [yellow]•[/yellow] {warning}", highlight=False)

    def _apply(self):
        try:
            result = self.session.apply()
        except (CommandError, GeneratorError) as e:
            self.console.print(f"[red]❌ {e}[/red]")
            return

        if not result.success:
            self.console.print(f"[red]❌ Generation failed:[/red] {result.error}")
            return

        self.console.print(f"[green]✅ Wrote {result.source_path}[/green]")
        if result.pending:
            self.console.print(
                f"[cyan]⏳ Asset {result.pending.destination_path} pending[/cyan]"
            )

    def _revert(self):
        if self.session.dirty and not Confirm.ask("Discard unsaved edits?", default=False):
            return
        try:
            self.session.revert()
        except GeneratorError as e:
            self.console.print(f"[red]❌ {e}[/red]")
            return
        self.console.print("[green]↩️  Reverted[/green]")

    def _quit(self) -> bool:
        if self.session.dirty and Confirm.ask("Save changes before quitting?", default=True):
            self.session.save()
        return True
