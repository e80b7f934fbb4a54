"""
Mirror command handler
"""
from typing import Any, Callable

from services.tree_mirror import TreeMirrorService


class MirrorHandler:
    """Handles the mirror command"""

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write
        self.mirror_service = TreeMirrorService()

    def handle(self, args: Any) -> int:
        result = self.mirror_service.mirror(args.source, args.destination, args.ext, overwrite=args.overwrite)
        for relative_path in result.copied:
            self.write(f"copied  {relative_path}")
        for relative_path in result.skipped:
            self.write(f"skipped {relative_path}")
        self.write(
            f"{len(result.copied)} file(s) copied ({result.bytes_copied / (1024 * 1024):.2f} MB), "
            f"{len(result.skipped)} skipped"
        )
        return 0
