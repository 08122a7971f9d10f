"""
Method-name filter list.

A filter file holds one rule per line. Blank lines and lines starting with
``#`` are skipped, lines starting with ``!`` are reject rules and every other
line is an allow rule::

    # only chain methods, but not the slow ones
    Filecoin.Chain
    !ChainNotify
"""

from pathlib import Path
from typing import Iterable, List, Optional

from ..models.errors import SetupError


class FilterList:
    """Allow/reject lists matched by case-sensitive substring containment.

    A name is authorized when the allow list is empty or one of its entries
    occurs in the name, and no reject entry occurs in it. Reject wins.
    """

    def __init__(self, allow: Optional[Iterable[str]] = None, reject: Optional[Iterable[str]] = None):
        self.allow_entries: List[str] = list(allow or [])
        self.reject_entries: List[str] = list(reject or [])

    @classmethod
    def from_substring(cls, substring: str) -> "FilterList":
        """Allow every name containing ``substring``."""
        return cls(allow=[substring] if substring else [])

    @classmethod
    def parse(cls, text: str) -> "FilterList":
        filter_list = cls()
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("!"):
                filter_list.reject(line.lstrip("!"))
            else:
                filter_list.allow(line)
        return filter_list

    @classmethod
    def from_file(cls, path: Path) -> "FilterList":
        """
        Read a filter file.

        Raises:
            SetupError: If the file cannot be read or is not UTF-8
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SetupError(f"cannot read filter file {path}: {e}", path=str(path)) from e
        return cls.parse(text)

    def allow(self, entry: str) -> "FilterList":
        self.allow_entries.append(entry)
        return self

    def reject(self, entry: str) -> "FilterList":
        self.reject_entries.append(entry)
        return self

    def authorize(self, name: str) -> bool:
        allowed = not self.allow_entries or any(entry in name for entry in self.allow_entries)
        rejected = any(entry in name for entry in self.reject_entries)
        return allowed and not rejected

    def __repr__(self) -> str:
        return f"FilterList(allow={self.allow_entries!r}, reject={self.reject_entries!r})"
