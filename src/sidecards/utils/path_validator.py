"""Path validation utilities for the vault root and vault-relative paths."""

from pathlib import Path, PurePosixPath

from ..error_codes import ErrorCode
from ..exceptions import ConfigurationError, StorageError


def validate_vault_path(vault_path: Path, allow_symlinks: bool = False) -> Path:
    """Validate the vault root for existence and safety.

    Args:
        vault_path: Path to validate
        allow_symlinks: Whether a symlinked vault root is accepted

    Returns:
        Resolved absolute path

    Raises:
        ConfigurationError: If path is missing, not a directory or a symlink
    """
    vault_path = vault_path.expanduser()

    if not vault_path.exists():
        raise ConfigurationError(
            f"Vault path does not exist: {vault_path}",
            suggestion="Point vault_path at an existing Obsidian vault directory",
            error_code=ErrorCode.CFG_INVALID_VALUE.value,
        )

    if not vault_path.is_dir():
        raise ConfigurationError(
            f"Vault path is not a directory: {vault_path}",
            suggestion="vault_path must point to a directory, not a file",
            error_code=ErrorCode.CFG_INVALID_VALUE.value,
        )

    if not allow_symlinks and vault_path.is_symlink():
        raise ConfigurationError(
            f"Vault path is a symlink: {vault_path}",
            suggestion="Use the real directory path of the vault",
            error_code=ErrorCode.CFG_INVALID_VALUE.value,
        )

    try:
        return vault_path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise ConfigurationError(
            f"Cannot resolve vault path: {vault_path}", suggestion=f"Error: {e}"
        )


def validate_flashcard_folder(folder: str) -> str:
    """Validate the vault-relative folder that holds record files.

    Returns:
        The folder as a normalised POSIX path without trailing slash

    Raises:
        ConfigurationError: If the folder is empty, absolute or climbs out of the vault
    """
    posix = PurePosixPath(folder.replace("\\", "/"))
    if not folder.strip() or posix.is_absolute() or ".." in posix.parts:
        raise ConfigurationError(
            f"Invalid flashcard folder: {folder!r}",
            suggestion="flashcard_folder must be a relative path inside the vault (no .. allowed)",
            error_code=ErrorCode.CFG_INVALID_VALUE.value,
        )
    return str(posix)


def resolve_in_vault(vault_path: Path, relative_path: str) -> Path:
    """Resolve a vault-relative path, rejecting anything outside the vault.

    Args:
        vault_path: Resolved vault root
        relative_path: POSIX path relative to the vault

    Returns:
        Absolute path inside the vault (may not exist yet)

    Raises:
        StorageError: If the path escapes the vault
    """
    candidate = (vault_path / relative_path).resolve(strict=False)
    if not candidate.is_relative_to(vault_path):
        raise StorageError(
            f"Path is outside vault: {relative_path}",
            suggestion="Document and record paths must stay within the vault directory",
            error_code=ErrorCode.STO_PATH_OUTSIDE_VAULT.value,
            context={"path": relative_path},
        )
    return candidate
