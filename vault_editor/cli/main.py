"""Vault Editor CLI - edit Ansible Vault secrets in place."""

from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..config.settings import get_settings
from ..utils.logging import setup_logging
from ..vault import (
    EditSession,
    FileDocument,
    SessionState,
    VaultConfig,
    VaultError,
    VaultIdRequiredError,
    VaultOrchestrator,
    encrypt_scalar,
)

app = typer.Typer(
    name="vault-editor",
    help="Edit inline and whole-file Ansible Vault secrets without leaving plaintext on disk.",
    no_args_is_help=True,
)

console = Console()

T = TypeVar("T")


def _vault_config(
    file: Path,
    vault_password_file: Optional[Path],
    vault_executable: Optional[str],
    ansible_cfg_dir: Optional[Path],
    debug: bool,
) -> VaultConfig:
    """Merge command line options over settings and set up logging."""
    settings = get_settings()
    config = replace(settings.vault)

    if vault_password_file:
        config.vault_password_file = str(vault_password_file.expanduser())
    if vault_executable:
        config.vault_executable = vault_executable
    if ansible_cfg_dir:
        config.ansible_cfg_directory = str(ansible_cfg_dir.expanduser())
    if debug:
        config.debug = True

    setup_logging(
        level="DEBUG" if config.debug else settings.log_level,
        log_file=settings.log_file,
    )
    return config.for_file(file)


def _require_file(file: Path) -> None:
    if not file.is_file():
        console.print(f"[red]Error: File not found: {escape(str(file))}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _choose_vault_id(vault_ids: list[str], prompt: str) -> Optional[str]:
    from ..tui import choose_vault_id

    return choose_vault_id(vault_ids, prompt)


def _with_vault_id(action: Callable[[Optional[str]], T], vault_id: Optional[str], prompt: str) -> T:
    """Run an encryption, asking for a vault-id and retrying once if needed."""
    try:
        return action(vault_id)
    except VaultIdRequiredError as e:
        choice = _choose_vault_id(e.vault_ids, prompt)
        if not choice:
            console.print("[yellow]Encryption cancelled (no vault-id selected)[/yellow]")
            raise typer.Exit(1)
        return action(choice)


# Shared option declarations
LINE_OPTION = typer.Option(1, "--line", "-l", min=1, help="1-based line of the vault block")
PASSWORD_FILE_OPTION = typer.Option(
    None, "--vault-password-file", help="File passed to ansible-vault --vault-password-file"
)
EXECUTABLE_OPTION = typer.Option(None, "--vault-executable", help="ansible-vault executable to run")
CFG_DIR_OPTION = typer.Option(
    None, "--ansible-cfg-dir", help="Directory with ansible.cfg (default: search upward from FILE)"
)
VAULT_ID_OPTION = typer.Option(None, "--vault-id", help="Vault-id to encrypt with")
DEBUG_OPTION = typer.Option(False, "--debug", help="Log ansible-vault invocations")


@app.command()
def view(
    file: Path = typer.Argument(..., help="YAML file or whole-file vault"),
    line: int = LINE_OPTION,
    vault_password_file: Optional[Path] = PASSWORD_FILE_OPTION,
    vault_executable: Optional[str] = EXECUTABLE_OPTION,
    ansible_cfg_dir: Optional[Path] = CFG_DIR_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """
    Print the decrypted vault at a line, or the whole vault file.
    """
    _require_file(file)
    config = _vault_config(file, vault_password_file, vault_executable, ansible_cfg_dir, debug)

    try:
        session = EditSession.open(VaultOrchestrator(config), FileDocument(file), line)
    except VaultError as e:
        _fail(e)

    plaintext = session.original_plaintext
    session.cancel()
    typer.echo(plaintext)


@app.command()
def edit(
    file: Path = typer.Argument(..., help="YAML file or whole-file vault"),
    line: int = LINE_OPTION,
    vault_id: Optional[str] = VAULT_ID_OPTION,
    vault_password_file: Optional[Path] = PASSWORD_FILE_OPTION,
    vault_executable: Optional[str] = EXECUTABLE_OPTION,
    ansible_cfg_dir: Optional[Path] = CFG_DIR_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """
    Decrypt the vault at a line (or the whole file), edit it, re-encrypt it.

    The vault is only rewritten when the text actually changed.
    """
    from ..tui import edit_plaintext

    _require_file(file)
    config = _vault_config(file, vault_password_file, vault_executable, ansible_cfg_dir, debug)

    try:
        session = EditSession.open(VaultOrchestrator(config), FileDocument(file), line, vault_id=vault_id)
    except VaultError as e:
        _fail(e)

    edited = edit_plaintext(session.name, session.original_plaintext)
    if edited is None:
        session.cancel()
        console.print("[yellow]Edit cancelled[/yellow]")
        return

    try:
        result = session.save(edited)
        if result.needs_vault_id:
            choice = _choose_vault_id(result.vault_ids, "Select vault-id for encryption")
            if not choice:
                session.cancel()
                console.print("[yellow]Encryption cancelled (no vault-id selected)[/yellow]")
                raise typer.Exit(1)
            result = session.retry_with_vault_id(choice)
    except VaultError as e:
        _fail(e)

    if result.status == SessionState.UNCHANGED:
        console.print("No changes")
    else:
        console.print(f"[green]Saved {escape(session.name)}[/green]")


@app.command()
def encrypt(
    file: Path = typer.Argument(..., help="Plaintext file to encrypt in place"),
    vault_id: Optional[str] = VAULT_ID_OPTION,
    vault_password_file: Optional[Path] = PASSWORD_FILE_OPTION,
    vault_executable: Optional[str] = EXECUTABLE_OPTION,
    ansible_cfg_dir: Optional[Path] = CFG_DIR_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """
    Encrypt a whole file in place.
    """
    _require_file(file)
    config = _vault_config(file, vault_password_file, vault_executable, ansible_cfg_dir, debug)
    vo = VaultOrchestrator(config)

    try:
        _with_vault_id(
            lambda chosen: vo.encrypt_path(file, vault_id=chosen),
            vault_id,
            "Select vault-id for file encryption",
        )
    except VaultError as e:
        _fail(e)

    console.print("[green]File encrypted successfully[/green]")


@app.command("encrypt-value")
def encrypt_value(
    file: Path = typer.Argument(..., help="YAML file"),
    line: int = typer.Option(..., "--line", "-l", min=1, help="1-based line holding `key: value`"),
    vault_id: Optional[str] = VAULT_ID_OPTION,
    vault_password_file: Optional[Path] = PASSWORD_FILE_OPTION,
    vault_executable: Optional[str] = EXECUTABLE_OPTION,
    ansible_cfg_dir: Optional[Path] = CFG_DIR_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """
    Replace a plain `key: value` line with an inline vault block.
    """
    _require_file(file)
    config = _vault_config(file, vault_password_file, vault_executable, ansible_cfg_dir, debug)
    vo = VaultOrchestrator(config)
    document = FileDocument(file)

    try:
        block = _with_vault_id(
            lambda chosen: encrypt_scalar(vo, document, line, vault_id=chosen),
            vault_id,
            "Select vault-id for inline encryption",
        )
    except VaultError as e:
        _fail(e)

    console.print(f"[green]Inline value encrypted: {escape(block.key)}[/green]")


@app.command()
def version():
    """Show version information."""
    console.print(f"Vault Editor v{__version__}")
    console.print("Ansible Vault inline editing tool")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
