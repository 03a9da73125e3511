from dataclasses import dataclass
from typing import Dict, Iterator, Optional


@dataclass
class SymtabEntry:
    """Storage cell for one variable. The value is always a Real."""
    name: str
    value: float = 0.0

    def get_value(self) -> float:
        return self.value

    def set_value(self, value: float):
        self.value = value


class SymbolTable:
    """Maps case-insensitive identifier names to their storage cells.

    The language has no declarations: the first reference to a name
    enters it with the value 0.0. Entries live as long as the table.
    """
    def __init__(self):
        self.entries: Dict[str, SymtabEntry] = {}

    def lookup(self, name: str) -> Optional[SymtabEntry]:
        return self.entries.get(name.lower())

    def enter(self, name: str) -> SymtabEntry:
        # Keep the spelling of the first occurrence.
        entry = self.entries.get(name.lower())
        if entry is None:
            entry = SymtabEntry(name)
            self.entries[name.lower()] = entry
        return entry

    def __contains__(self, name: str) -> bool:
        return name.lower() in self.entries

    def __iter__(self) -> Iterator[SymtabEntry]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)
