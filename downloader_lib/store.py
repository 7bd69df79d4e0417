"""On-disk store of mirrored images, keyed by canonical filename."""
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from downloader_lib.errors import EntryExistsError, FilesystemFailure
from utils.constants import CANONICAL_EXT, LOGGER_NAME
from utils.filenames import clean_existing_name, is_degenerate_name


class MirrorStore:
    """A flat directory of canonically named images.

    Entries are created once and never overwritten. ``cleanup`` renames
    entries written under older naming rules.
    """

    def __init__(self, directory, canonical_ext: str = CANONICAL_EXT, logger: Optional[logging.Logger] = None):
        self.directory = Path(directory)
        self.canonical_ext = canonical_ext
        self.logger = logger or logging.getLogger(f'{LOGGER_NAME}.store')

    def ensure_directory(self) -> None:
        """Create the mirror directory (and parents) if missing."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemFailure(f"Could not create mirror directory {self.directory}: {e}") from e

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()

    def write(self, filename: str, data: bytes) -> Path:
        """Create a new entry holding ``data``.

        Raises:
            EntryExistsError: an entry with this name is already present
            FilesystemFailure: any other OS error; no partial file is left behind
        """
        path = self.path_for(filename)
        try:
            # 'x' mode: the filesystem refuses a second writer for the same name
            f = open(path, 'xb')
        except FileExistsError as e:
            raise EntryExistsError(f"Mirror entry already exists: {filename}") from e
        except OSError as e:
            raise FilesystemFailure(f"Could not create {path}: {e}") from e

        try:
            with f:
                f.write(data)
        except OSError as e:
            try:
                path.unlink()
            except OSError:
                self.logger.warning(f"Could not remove partial file {path}")
            raise FilesystemFailure(f"Could not write {path}: {e}") from e
        return path

    def list_entries(self) -> List[str]:
        """Sorted names of the regular, non-hidden files in the store."""
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name for p in self.directory.iterdir()
            if p.is_file() and not p.name.startswith('.')
        )

    def preview_cleanup(self) -> List[Tuple[str, str]]:
        """Return ``(old, new)`` pairs for every entry cleanup would rename.

        Names that would shrink to the bare extension are left as they are.
        """
        changes = []
        for name in self.list_entries():
            new_name = clean_existing_name(name, self.canonical_ext)
            if is_degenerate_name(new_name, self.canonical_ext):
                self.logger.warning(f"Keep {name}: cleaning would leave no name")
                continue
            if new_name != name:
                changes.append((name, new_name))
        return changes

    def cleanup(self) -> List[Tuple[str, str]]:
        """Rename entries whose names are not in canonical form.

        A rename whose target already exists is skipped, and a failed rename
        is logged; either way the pass carries on with the next entry.

        Returns:
            The ``(old, new)`` pairs that were actually renamed
        """
        renamed = []
        for old_name, new_name in self.preview_cleanup():
            old_path = self.path_for(old_name)
            new_path = self.path_for(new_name)
            if new_path.exists():
                self.logger.warning(f"Skip rename {old_name} -> {new_name}: target already exists")
                continue
            try:
                os.rename(old_path, new_path)
            except OSError as e:
                self.logger.error(f"Could not rename {old_name} -> {new_name}: {e}")
                continue
            self.logger.info(f"Renamed: {old_name} -> {new_name}")
            renamed.append((old_name, new_name))
        return renamed
