import os
from pathlib import Path
from typing import Iterable, Generator

class FileScanner:
    """Recursively scans for transcodable video files in a directory.

    A file matches when its extension is accepted and its name does not
    already carry the output tag (i.e. it is not one of our own outputs).
    """

    def __init__(self, extensions: Iterable[str], output_tag: str):
        self.extensions = {ext.lstrip(".").lower() for ext in extensions}
        self.output_tag = output_tag

    def matches(self, file_path: Path) -> bool:
        if file_path.suffix.lstrip(".").lower() not in self.extensions:
            return False
        return self.output_tag not in file_path.name

    def scan(self, root_dir: Path) -> Generator[Path, None, None]:
        """Scans the directory and yields matching regular files."""
        for root, dirs, files in os.walk(str(root_dir)):
            root_path = Path(root)

            # Deterministic traversal; callers must not rely on it
            dirs.sort()
            files.sort()

            for file_name in files:
                file_path = root_path / file_name
                if not self.matches(file_path):
                    continue
                if not file_path.is_file():
                    continue
                yield file_path
