import os
from abc import ABC, abstractmethod
from typing import Dict


class OutputSink(ABC):
    """Abstracts persistence so generation can be hosted without a disk."""

    @abstractmethod
    def write(self, path: str, source: str) -> None: ...


class FileSink(OutputSink):
    def write(self, path: str, source: str) -> None:
        out_dir = os.path.dirname(path)
        if out_dir and not os.path.isdir(out_dir):
            os.makedirs(out_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(source)


class MemorySink(OutputSink):
    def __init__(self):
        self.files: Dict[str, str] = {}

    def write(self, path: str, source: str) -> None:
        self.files[path] = source
