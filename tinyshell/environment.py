"""The shell's ordered table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Optional, Union


def is_valid_identifier(text: str) -> bool:
    """Tell whether ``text`` (up to any ``=``) is a valid variable name."""
    name = text.partition("=")[0]
    if not name or not _is_name_start(name[0]):
        return False
    return all(_is_name_start(ch) or "0" <= ch <= "9" for ch in name[1:])


def _is_name_start(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def split_assignment(text: str) -> tuple[str, str]:
    """Split ``NAME=value`` into name and value; without ``=`` the value is empty."""
    name, _, value = text.partition("=")
    return name, value


@dataclass
class EnvVar:
    """One variable: its name, value (None when unset) and visibility."""

    name: str
    value: Optional[str] = None
    printable: bool = True


Entry = Union[str, EnvVar]


class Environment:
    """Variables kept in insertion order, as the shell displays them."""

    def __init__(self, entries: Union[Mapping[str, str], Iterable[Entry], None] = None) -> None:
        self._vars: dict[str, EnvVar] = {}
        if entries is None:
            return
        if isinstance(entries, Mapping):
            for name, value in entries.items():
                self._vars[name] = EnvVar(name, value)
            return
        for entry in entries:
            if isinstance(entry, EnvVar):
                self._vars[entry.name] = EnvVar(entry.name, entry.value, entry.printable)
            else:
                name, value = split_assignment(entry)
                self._vars[name] = EnvVar(name, value)

    def get(self, name: str) -> Optional[str]:
        """Return the value of a visible variable, or None."""
        var = self._vars.get(name)
        if var is None or not var.printable:
            return None
        return var.value

    def contains(self, name: str) -> bool:
        """Tell whether a variable of that name exists, visible or not."""
        return name in self._vars

    def replace(self, name: str, value: Optional[str]) -> bool:
        """Set the value of an existing variable; never creates one."""
        var = self._vars.get(name)
        if var is None:
            return False
        var.value = value
        return True

    def assign(self, assignment: str) -> EnvVar:
        """Apply ``NAME=value`` (or ``NAME``): update in place or append."""
        if not is_valid_identifier(assignment):
            raise ValueError(f"not a valid identifier: {assignment!r}")
        name, value = split_assignment(assignment)
        var = self._vars.get(name)
        if var is None:
            var = EnvVar(name, value)
            self._vars[name] = var
        else:
            var.value = value
            var.printable = True
        return var

    def unset(self, name: str) -> bool:
        """Remove a variable; return whether it existed."""
        return self._vars.pop(name, None) is not None

    def change_pwd(self, previous: Optional[str], current: Optional[str]) -> None:
        """Record a directory change from ``previous`` to ``current``.

        With a visible PWD, OLDPWD takes its value and PWD becomes ``current``;
        otherwise OLDPWD becomes ``previous``. Nothing changes when ``current``
        is None (the new directory could not be determined).
        """
        if current is None:
            return
        old_pwd = self.get("PWD")
        if old_pwd is not None:
            self.replace("OLDPWD", old_pwd)
            self.replace("PWD", current)
        else:
            self.replace("OLDPWD", previous)

    def to_envp(self) -> list[str]:
        """Return ``NAME=value`` strings for the variables that have a value."""
        return [f"{var.name}={var.value}" for var in self if var.value is not None]

    def lines(self) -> list[str]:
        """Return the lines the ``env`` builtin prints, in order."""
        return self.to_envp()

    def sorted_vars(self) -> list[EnvVar]:
        """Return the variables ordered by name."""
        return sorted(self._vars.values(), key=lambda var: var.name)

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(list(self._vars.values()))

    def __len__(self) -> int:
        return len(self._vars)