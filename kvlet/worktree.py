"""The working directory: a flat set of plain files."""

from pathlib import Path


class WorkingTree:
    """Plain files directly inside ``root``.

    Subdirectories (including the repository's own storage directory)
    are never listed, read or removed.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path(self, name: str) -> Path:
        return self.root / name

    def names(self) -> list[str]:
        """Names of all plain files, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def read(self, name: str) -> bytes:
        return self.path(name).read_bytes()

    def write(self, name: str, contents: bytes) -> None:
        self.path(name).write_bytes(contents)

    def delete(self, name: str) -> None:
        self.path(name).unlink(missing_ok=True)
