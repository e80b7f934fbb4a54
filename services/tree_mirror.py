"""
Tree mirror service
Copies files with selected extensions into a destination tree, keeping relative layout
"""
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Set

from services.errors import MirrorError

logger = logging.getLogger(__name__)


@dataclass
class MirrorResult:
    """Outcome of a mirror run"""
    source: Path
    destination: Path
    copied: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    bytes_copied: int = 0


class TreeMirrorService:
    """Mirror a directory tree, filtered by file extension"""

    @staticmethod
    def normalize_extensions(extensions: Iterable[str]) -> Set[str]:
        """Lower-case extensions with a leading dot"""
        normalized = set()
        for extension in extensions:
            extension = extension.strip().lower()
            if not extension:
                continue
            normalized.add(extension if extension.startswith('.') else f'.{extension}')
        return normalized

    def mirror(self, source: str, destination: str, extensions: Iterable[str], overwrite: bool = False) -> MirrorResult:
        source_root = Path(source)
        destination_root = Path(destination)
        wanted = self.normalize_extensions(extensions)

        if not source_root.is_dir():
            raise MirrorError(f"Source directory does not exist: {source_root}")
        if not wanted:
            raise MirrorError("At least one file extension is required")

        result = MirrorResult(source=source_root, destination=destination_root)

        for path in sorted(source_root.rglob('*')):
            if not path.is_file() or path.suffix.lower() not in wanted:
                continue

            relative_path = path.relative_to(source_root)
            target = destination_root / relative_path
            if target.exists() and not overwrite:
                result.skipped.append(relative_path)
                continue

            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(path, target)
            except OSError as e:
                raise MirrorError(f"Could not copy {path} to {target}: {e}")

            result.copied.append(relative_path)
            result.bytes_copied += path.stat().st_size
            logger.debug(f"Copied {relative_path}")

        logger.info(
            f"Mirrored {len(result.copied)} file(s) from {source_root} to {destination_root}, "
            f"skipped {len(result.skipped)}"
        )
        return result
