"""
Auxiliary File Cleanup

Removes compilation byproducts once a compile is done. The manager is armed with
the document's base path, then releases exactly once, either through an explicit
cleanup() call or when its `with` block exits. Logs are kept when a compile fails
so they can be inspected.
"""

from pathlib import Path
from typing import List

from texpress.contexts.rendering.logger import _log_debug, _log_warning

# Always removed
AUXILIARY_EXTENSIONS = (".out", ".aux")

# Removed unless logs are preserved
LOG_EXTENSIONS = (".blg", ".log")


class AuxCleanupManager:
    """
    Scoped cleanup of auxiliary files for one document.

    Inactive until init() is called. After cleanup() runs, the base path is
    cleared so further calls do nothing.

    Example:
        >>> with AuxCleanupManager() as cleanup:
        ...     cleanup.init(Path("paper.tex"))
        ...     if failed:
        ...         cleanup.preserve_log()
        # .aux/.out removed here; .log/.blg only if the compile succeeded
    """

    def __init__(self):
        self.base_path = ""
        self.clean_log = True

    @property
    def active(self) -> bool:
        return bool(self.base_path)

    def init(self, tex_path: Path) -> None:
        """Arm cleanup for the files sharing tex_path's stem."""
        tex_path = Path(tex_path).absolute()
        self.base_path = str(tex_path.parent / tex_path.stem)

    def preserve_log(self) -> None:
        """Keep .log and .blg files when cleanup runs."""
        self.clean_log = False

    def cleanup(self) -> List[Path]:
        """
        Remove recognised byproducts.

        .bbl is removed only when a .bib with the same stem exists (otherwise the
        .bbl may be hand-maintained). Deletion errors are logged, never raised.

        Returns:
            Files that were removed
        """
        if not self.active:
            return []

        removed = []
        for ext in AUXILIARY_EXTENSIONS:
            removed += self._remove(ext)

        if self._exists(".bib"):
            removed += self._remove(".bbl")

        if self.clean_log:
            for ext in LOG_EXTENSIONS:
                removed += self._remove(ext)

        _log_debug(f"Cleaned up {len(removed)} auxiliary files for {Path(self.base_path).name}")

        # Only clean once
        self.base_path = ""
        return removed

    def _path(self, ext: str) -> Path:
        return Path(self.base_path + ext)

    def _exists(self, ext: str) -> bool:
        return self._path(ext).exists()

    def _remove(self, ext: str) -> List[Path]:
        path = self._path(ext)
        try:
            if path.exists():
                path.unlink()
                return [path]
        except OSError as e:
            _log_warning(f"Unable to remove {path}: {e}")
        return []

    def __enter__(self) -> "AuxCleanupManager":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.cleanup()
