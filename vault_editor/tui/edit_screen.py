"""Vault editing screens and dialogs."""

from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static, TextArea


HELP_TEXT = "\n".join(
    [
        "Vault editor keybindings:",
        "",
        "  Ctrl+S : Save & encrypt, close",
        "  Esc    : Cancel, close without saving",
        "  F2     : Copy to clipboard",
        "  F1     : Show this help",
    ]
)


class VaultEditScreen(ModalScreen[Optional[str]]):
    """Modal editor for a decrypted vault value.

    Returns the edited text on save, None if cancelled.

    Usage:
        self.push_screen(VaultEditScreen("db_password", plaintext), callback=self._on_edit)
    """

    BINDINGS = [
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("escape", "cancel", "Cancel", priority=True),
        Binding("f2", "copy", "Copy", show=False),
        Binding("f1", "help", "Help", show=False),
    ]

    DEFAULT_CSS = """
    VaultEditScreen {
        align: center middle;
    }

    VaultEditScreen > Container {
        width: 90%;
        height: 90%;
        border: round $primary;
        background: $surface;
    }

    VaultEditScreen .edit-title {
        dock: top;
        text-align: center;
        text-style: bold;
        width: 100%;
        padding: 0 1;
        background: $primary;
        color: $text;
    }

    VaultEditScreen TextArea {
        height: 1fr;
    }

    VaultEditScreen .edit-hint {
        dock: bottom;
        text-align: center;
        width: 100%;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        vault_name: str,
        plaintext: str,
        name: Optional[str] = None,
    ) -> None:
        """Initialize the edit screen.

        Args:
            vault_name: Key or file name shown in the title.
            plaintext: Decrypted value to edit.
            name: Screen name.
        """
        super().__init__(name=name)
        self.vault_name = vault_name
        self.plaintext = plaintext

    def compose(self) -> ComposeResult:
        """Compose the editor layout."""
        with Container():
            yield Static(f"Edit Vault: {self.vault_name}", classes="edit-title")
            yield TextArea(self.plaintext, id="vault-text")
            yield Static(
                "[dim]Ctrl+S save | Esc cancel | F2 copy | F1 help[/dim]",
                classes="edit-hint",
            )

    def on_mount(self) -> None:
        """Focus the editor on mount."""
        self.query_one("#vault-text", TextArea).focus()

    @property
    def current_text(self) -> str:
        return self.query_one("#vault-text", TextArea).text

    def action_save(self) -> None:
        """Close and hand the edited text back."""
        self.dismiss(self.current_text)

    def action_cancel(self) -> None:
        """Close without saving."""
        self.dismiss(None)

    def action_copy(self) -> None:
        """Copy the current text to the clipboard."""
        self.app.copy_to_clipboard(self.current_text)
        self.notify("Copied to clipboard")

    def action_help(self) -> None:
        """Show keybindings."""
        self.notify(HELP_TEXT, timeout=8)


class VaultIdScreen(ModalScreen[Optional[str]]):
    """Modal list for choosing the vault-id to encrypt with.

    Returns the chosen vault-id, None if cancelled.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    DEFAULT_CSS = """
    VaultIdScreen {
        align: center middle;
    }

    VaultIdScreen > Container {
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    VaultIdScreen .dialog-title {
        text-align: center;
        text-style: bold;
        width: 100%;
        margin-bottom: 1;
    }

    VaultIdScreen OptionList {
        height: auto;
        max-height: 12;
    }
    """

    def __init__(
        self,
        vault_ids: list[str],
        prompt: str = "Select vault-id for encryption",
        name: Optional[str] = None,
    ) -> None:
        """Initialize the vault-id chooser.

        Args:
            vault_ids: Vault-ids reported by ansible-vault, in order.
            prompt: Title shown above the list.
            name: Screen name.
        """
        super().__init__(name=name)
        self.vault_ids = list(vault_ids)
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        """Compose the dialog layout."""
        with Container():
            yield Static(f"[bold]{self.prompt}[/bold]", classes="dialog-title")
            yield OptionList(*self.vault_ids, id="vault-ids")

    def on_mount(self) -> None:
        """Focus the list on mount."""
        self.query_one("#vault-ids", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Return the selected vault-id."""
        self.dismiss(self.vault_ids[event.option_index])

    def action_cancel(self) -> None:
        """Cancel the dialog."""
        self.dismiss(None)


class VaultEditApp(App[Optional[str]]):
    """Single-screen app hosting one editor or chooser, exiting with its result."""

    TITLE = "Vault Editor"

    def __init__(self, screen: ModalScreen) -> None:
        super().__init__()
        self._initial_screen = screen

    def on_mount(self) -> None:
        self.push_screen(self._initial_screen, callback=self.exit)


def edit_plaintext(vault_name: str, plaintext: str) -> Optional[str]:
    """Run the editor and return the edited text, or None if cancelled."""
    return VaultEditApp(VaultEditScreen(vault_name, plaintext)).run()


def choose_vault_id(vault_ids: list[str], prompt: str = "Select vault-id for encryption") -> Optional[str]:
    """Run the vault-id chooser and return the choice, or None if cancelled."""
    return VaultEditApp(VaultIdScreen(vault_ids, prompt)).run()
