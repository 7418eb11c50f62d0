"""Ordered merging of several text files into one.

A :class:`CombineList` holds the files the user picked, in the order the
user wants them. Reordering only touches the list; :meth:`combine` reads
each file in turn and joins the contents with :data:`SEPARATOR`. Reads are
sequential so the output order is exactly the list order.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from ocrpro.errors import CombineError
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)

SEPARATOR = "\n\n---\n\n"
TEXT_MEDIA_TYPE = "text/plain"


@dataclass(frozen=True)
class TextFile:
    """A reference to one picked file; contents are read only on combine."""

    name: str
    media_type: str | None = None
    path: Path | None = None

    @property
    def is_text(self) -> bool:
        if self.media_type:
            return self.media_type.split(";", 1)[0].strip().lower() == TEXT_MEDIA_TYPE
        return self.name.lower().endswith(".txt")

    @classmethod
    def from_path(cls, path: Path) -> "TextFile":
        media_type = TEXT_MEDIA_TYPE if path.suffix.lower() == ".txt" else None
        return cls(name=path.name, media_type=media_type, path=path)


def read_path(file: TextFile) -> str:
    """Default reader: load a file reference from disk as UTF-8."""
    if file.path is None:
        raise OSError(f"{file.name} has no path to read from")
    return file.path.read_text(encoding="utf-8")


class CombineList:
    """User-ordered list of text files to merge."""

    def __init__(self, files: Iterable[TextFile] = ()) -> None:
        self._files: list[TextFile] = []
        self.add(files)

    @property
    def files(self) -> Sequence[TextFile]:
        return tuple(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def add(self, files: Iterable[TextFile]) -> list[str]:
        """Append the text files among ``files``.

        Returns:
            One warning per skipped non-text file.
        """
        warnings: list[str] = []
        for file in files:
            if file.is_text:
                self._files.append(file)
            else:
                message = f"Skipped {file.name}: only .txt files can be combined"
                logger.warning(message)
                warnings.append(message)
        return warnings

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._files):
            raise IndexError(f"no file at position {index}")

    def move_up(self, index: int) -> None:
        self._check(index)
        if index > 0:
            self.move(index, index - 1)

    def move_down(self, index: int) -> None:
        self._check(index)
        if index < len(self._files) - 1:
            self.move(index, index + 1)

    def remove(self, index: int) -> TextFile:
        self._check(index)
        return self._files.pop(index)

    def move(self, from_index: int, to_index: int) -> None:
        """Drag the file at ``from_index`` so that it lands at ``to_index``.

        Files in between shift by one position towards the vacated slot.
        """
        self._check(from_index)
        self._check(to_index)
        file = self._files.pop(from_index)
        self._files.insert(to_index, file)

    def clear(self) -> None:
        self._files.clear()

    def combine(self, reader: Callable[[TextFile], str] = read_path) -> str:
        """Read every file in list order and join the contents.

        Raises:
            CombineError: The list is empty or any file failed to read.
                Nothing read before the failure is returned.
        """
        if not self._files:
            raise CombineError("Add at least one text file to combine")

        contents: list[str] = []
        for file in self._files:
            try:
                contents.append(reader(file))
            except Exception as exc:
                logger.error("Failed to read %s: %s", file.name, exc)
                raise CombineError("Failed to combine files") from exc

        logger.info("Combined %d files", len(contents))
        return SEPARATOR.join(contents)
