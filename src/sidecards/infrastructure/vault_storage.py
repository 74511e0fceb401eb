"""Filesystem implementation of IDocumentStorage rooted at an Obsidian vault."""

from pathlib import Path, PurePosixPath

from ..constants import DOCUMENT_SUFFIX
from ..domain.interfaces.document_storage import IDocumentStorage
from ..error_codes import ErrorCode
from ..exceptions import StorageError
from ..utils.io import atomic_write_text, create_exclusive_text
from ..utils.logging import get_logger
from ..utils.path_validator import resolve_in_vault, validate_flashcard_folder

logger = get_logger(__name__)


class VaultStorage(IDocumentStorage):
    """Read and write vault files addressed by vault-relative POSIX paths.

    Writes are atomic (temp file + rename). Paths resolving outside the
    vault root are rejected with StorageError.
    """

    def __init__(self, vault_path: Path, flashcard_folder: str):
        self.vault_path = Path(vault_path).expanduser().resolve()
        self.flashcard_folder = validate_flashcard_folder(flashcard_folder)

    def _resolve(self, path: str) -> Path:
        return resolve_in_vault(self.vault_path, path)

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.vault_path).as_posix()

    def read_text(self, path: str) -> str:
        full_path = self._resolve(path)
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(
                f"Cannot read file: {path}",
                error_code=ErrorCode.STO_READ_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e

    def write_text(self, path: str, text: str) -> None:
        full_path = self._resolve(path)
        try:
            atomic_write_text(full_path, text)
        except OSError as e:
            raise StorageError(
                f"Cannot write file: {path}",
                error_code=ErrorCode.STO_WRITE_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e
        logger.debug("file_written", path=path, chars=len(text))

    def create_file(self, path: str, text: str) -> None:
        full_path = self._resolve(path)
        try:
            create_exclusive_text(full_path, text)
        except FileExistsError as e:
            raise StorageError(
                f"File already exists: {path}",
                suggestion="Choose a different name; existing files are never overwritten on create",
                error_code=ErrorCode.STO_WRITE_FAILED.value,
                context={"path": path},
            ) from e
        except OSError as e:
            raise StorageError(
                f"Cannot create file: {path}",
                error_code=ErrorCode.STO_WRITE_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e
        logger.debug("file_created", path=path)

    def delete_file(self, path: str) -> None:
        full_path = self._resolve(path)
        try:
            full_path.unlink()
        except OSError as e:
            raise StorageError(
                f"Cannot delete file: {path}",
                error_code=ErrorCode.STO_DELETE_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e
        logger.debug("file_deleted", path=path)

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def ensure_folder(self, folder: str) -> None:
        full_path = self._resolve(folder)
        try:
            full_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create folder: {folder}",
                error_code=ErrorCode.STO_WRITE_FAILED.value,
                context={"path": folder, "error": str(e)},
            ) from e

    def list_files(self, folder: str, suffix: str) -> list[str]:
        full_folder = self._resolve(folder)
        if not full_folder.is_dir():
            return []
        try:
            return sorted(
                self._relative(p)
                for p in full_folder.iterdir()
                if p.is_file() and p.name.endswith(suffix)
            )
        except OSError as e:
            raise StorageError(
                f"Cannot list folder: {folder}",
                error_code=ErrorCode.STO_READ_FAILED.value,
                context={"path": folder, "error": str(e)},
            ) from e

    def list_documents(self) -> list[str]:
        card_parts = PurePosixPath(self.flashcard_folder).parts
        documents = []
        try:
            for md_file in self.vault_path.rglob(f"*{DOCUMENT_SUFFIX}"):
                relative = md_file.relative_to(self.vault_path)
                # Hidden folders (.obsidian, .trash) are never user documents
                if any(part.startswith(".") for part in relative.parts[:-1]):
                    continue
                if relative.parts[: len(card_parts)] == card_parts:
                    continue
                if md_file.is_file():
                    documents.append(relative.as_posix())
        except OSError as e:
            raise StorageError(
                "Cannot list vault documents",
                error_code=ErrorCode.STO_READ_FAILED.value,
                context={"path": str(self.vault_path), "error": str(e)},
            ) from e

        documents.sort()
        logger.debug("discovered_documents", count=len(documents))
        return documents
