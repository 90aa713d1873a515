"""
Character classes - named, ordered sets of Unicode code points.

The default registry is built at import time and never changes. Registries
are extended by creating a new registry, so grammars and generators running
on other threads keep seeing the classes they were validated against.

Everything here works on code points (ints), never on UTF-16 units or
encoded bytes, so classes containing characters beyond U+FFFF behave like
any other class.
"""

import sys
import threading
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

from ..errors import UnknownCharacterClass
from ..utils.logger import get_logger

logger = get_logger(__name__)

# First and last UTF-16 surrogate code points
SURROGATES = (0xD800, 0xDFFF)


@dataclass(frozen=True)
class CharacterClass:
    """An ordered set of Unicode scalar values (surrogates are rejected)."""
    name: str
    codepoints: Tuple[int, ...]
    _members: FrozenSet[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        ordered = tuple(dict.fromkeys(self.codepoints))
        for codepoint in ordered:
            if (
                isinstance(codepoint, bool)
                or not isinstance(codepoint, int)
                or not 0 <= codepoint <= sys.maxunicode
                or SURROGATES[0] <= codepoint <= SURROGATES[1]
            ):
                raise ValueError(f"Invalid code point {codepoint!r} in class '{self.name}'")
        object.__setattr__(self, "codepoints", ordered)
        object.__setattr__(self, "_members", frozenset(ordered))

    def __contains__(self, codepoint) -> bool:
        if isinstance(codepoint, str):
            if len(codepoint) != 1:
                return False
            codepoint = ord(codepoint)
        return codepoint in self._members

    def __len__(self) -> int:
        return len(self.codepoints)

    def __iter__(self) -> Iterator[int]:
        return iter(self.codepoints)

    def __getitem__(self, index):
        return self.codepoints[index]

    def without(self, exclude: Iterable[int]) -> 'CharacterClass':
        """Return a copy of this class with the given code points removed."""
        exclude = frozenset(exclude)
        if not exclude:
            return self
        return CharacterClass(
            self.name,
            tuple(cp for cp in self.codepoints if cp not in exclude),
        )


# ASCII control and separator characters, by their conventional names
WELL_KNOWN_CLASSES: Dict[str, Tuple[int, ...]] = {
    "NUL": (0x0000,),
    "TAB": (0x0009,),
    "LF": (0x000A,),
    "VT": (0x000B,),
    "FF": (0x000C,),
    "CR": (0x000D,),
    "FS": (0x001C,),
    "GS": (0x001D,),
    "RS": (0x001E,),
    "US": (0x001F,),
    "SPACE": (0x0020,),
}

# Two-letter Unicode general categories, e.g. "Lu", "Nd", "Zs". "Cs" is left out:
# surrogates are not scalar values and cannot be encoded.
UNICODE_CATEGORIES = frozenset({
    "Lu", "Ll", "Lt", "Lm", "Lo",
    "Mn", "Mc", "Me",
    "Nd", "Nl", "No",
    "Pc", "Pd", "Ps", "Pe", "Pi", "Pf", "Po",
    "Sm", "Sc", "Sk", "So",
    "Zs", "Zl", "Zp",
    "Cc", "Cf", "Co", "Cn",
})

_category_cache: Dict[str, CharacterClass] = {}
_category_lock = threading.Lock()


def _unicode_category(name: str) -> CharacterClass:
    """Build (once) the class of every code point in a general category."""
    with _category_lock:
        cached = _category_cache.get(name)
        if cached is None:
            logger.debug(f"Building Unicode category class {name}")
            codepoints = tuple(
                cp for cp in range(sys.maxunicode + 1)
                if unicodedata.category(chr(cp)) == name
                and not SURROGATES[0] <= cp <= SURROGATES[1]
            )
            cached = _category_cache[name] = CharacterClass(name, codepoints)
        return cached


class CharacterClassRegistry(Mapping[str, CharacterClass]):
    """
    Immutable mapping from class name to CharacterClass.

    Explicit classes take precedence over the Unicode general categories,
    which are resolved on first use and shared between registries.
    """

    def __init__(
        self,
        classes: Optional[Mapping[str, Iterable[int]]] = None,
        unicode_categories: bool = True,
    ):
        self._classes: Dict[str, CharacterClass] = {}
        for name, codepoints in (classes or {}).items():
            if isinstance(codepoints, CharacterClass):
                self._classes[name] = codepoints
            else:
                self._classes[name] = CharacterClass(name, tuple(_as_codepoints(codepoints)))
        self._unicode_categories = unicode_categories

    def lookup(self, name: str, exclude: Iterable[int] = ()) -> CharacterClass:
        """
        Resolve a class by name.

        Args:
            name: Class name
            exclude: Code points to leave out of the returned class

        Returns:
            The named CharacterClass, minus any exclusions

        Raises:
            UnknownCharacterClass: If no class has that name
        """
        found = self._classes.get(name)
        if found is None:
            if self._unicode_categories and name in UNICODE_CATEGORIES:
                found = _unicode_category(name)
            else:
                raise UnknownCharacterClass(name)
        return found.without(exclude)

    def extend(self, classes: Mapping[str, Iterable[int]]) -> 'CharacterClassRegistry':
        """
        Return a new registry with additional classes.

        Raises:
            ValueError: If a name is already defined here
        """
        for name in classes:
            if name in self:
                raise ValueError(f"Character class '{name}' is already defined")
        merged: Dict[str, Iterable[int]] = dict(self._classes)
        merged.update(classes)
        return CharacterClassRegistry(merged, unicode_categories=self._unicode_categories)

    def __getitem__(self, name: str) -> CharacterClass:
        try:
            return self.lookup(name)
        except UnknownCharacterClass:
            raise KeyError(name)

    def __contains__(self, name) -> bool:
        return name in self._classes or (
            self._unicode_categories and name in UNICODE_CATEGORIES
        )

    def __iter__(self) -> Iterator[str]:
        # Only explicit classes; iterating categories would force building all of them
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"CharacterClassRegistry({sorted(self._classes)})"


def _as_codepoints(items: Iterable) -> Iterator[int]:
    """Accept ints or strings; a string contributes each of its code points."""
    if isinstance(items, str):
        items = [items]
    for item in items:
        if isinstance(item, str):
            yield from (ord(ch) for ch in item)
        else:
            yield item


DEFAULT_CHARACTER_CLASSES = CharacterClassRegistry(WELL_KNOWN_CLASSES)
