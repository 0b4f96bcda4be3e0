"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File operations with side effects: trash, same-volume move, atomic write.
"""
import os
import shutil
from pathlib import Path
from send2trash import send2trash


class FileService:
    """
    Thin wrappers that translate OS errors into messages the batch layer can record.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).absolute()

        if not os.path.lexists(path):
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def rename(src: str, dest: str) -> None:
        """
        Single os.rename; no copy fallback, so a cross-volume move fails
        with OSError (EXDEV) instead of silently copying.
        """
        os.rename(src, dest)

    @staticmethod
    def write_text_atomic(path: Path, text: str) -> None:
        """Write to a sibling temp file, then replace the target in one step."""
        path = Path(path)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    @staticmethod
    def remove_tree(path: Path) -> None:
        """Recursive delete; errors propagate to the caller."""
        shutil.rmtree(path)
