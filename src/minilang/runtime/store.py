"""
Global variable store for the interpreter.

The language has a single scope: blocks, branches and loop bodies all read
and write the same store. Reading a name that was never assigned yields 0.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator


@dataclass
class VariableStore:
    """
    Mapping from variable name to integer value.

    Entries are created or updated only by assignment; there is no way to
    delete a single variable from a running program.
    """
    variables: Dict[str, int] = field(default_factory=dict)

    def get(self, name: str) -> int:
        """Look up a variable. Unassigned names read as 0."""
        return self.variables.get(name, 0)

    def set(self, name: str, value: int) -> None:
        """Create or update a variable."""
        self.variables[name] = value

    def snapshot(self) -> Dict[str, int]:
        """Copy of the current bindings."""
        return dict(self.variables)

    def clear(self) -> None:
        self.variables.clear()

    def __contains__(self, name: str) -> bool:
        return name in self.variables

    def __len__(self) -> int:
        return len(self.variables)

    def __iter__(self) -> Iterator[str]:
        return iter(self.variables)
