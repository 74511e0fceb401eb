"""Interface for document and record file storage."""

from abc import ABC, abstractmethod


class IDocumentStorage(ABC):
    """Interface for reading and writing vault files.

    Paths are vault-relative POSIX strings. Every method raises
    StorageError when the underlying I/O fails.
    """

    @abstractmethod
    def read_text(self, path: str) -> str:
        """Read a file as UTF-8 text.

        Args:
            path: Vault-relative path

        Returns:
            File contents
        """
        pass

    @abstractmethod
    def write_text(self, path: str, text: str) -> None:
        """Replace a file's contents, creating it if needed.

        Args:
            path: Vault-relative path
            text: New contents
        """
        pass

    @abstractmethod
    def create_file(self, path: str, text: str) -> None:
        """Create a new file.

        Args:
            path: Vault-relative path
            text: Initial contents

        Raises:
            StorageError: If the file already exists
        """
        pass

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Delete a file.

        Args:
            path: Vault-relative path
        """
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file or folder exists."""
        pass

    @abstractmethod
    def ensure_folder(self, folder: str) -> None:
        """Create a folder (and parents) if it does not exist."""
        pass

    @abstractmethod
    def list_files(self, folder: str, suffix: str) -> list[str]:
        """List files directly inside a folder.

        Args:
            folder: Vault-relative folder
            suffix: File suffix to match (e.g. ".json")

        Returns:
            Sorted vault-relative paths
        """
        pass

    @abstractmethod
    def list_documents(self) -> list[str]:
        """List every Markdown document in the vault.

        Returns:
            Sorted vault-relative paths, excluding the flashcard folder
        """
        pass
