"""Elm identifier derivation for schema entities.

Elm has no nested type declarations, so a type nested at path ``[A, B]`` with
local name ``C`` is flattened to ``A_B_C``. Each segment is camel-cased on
its own before joining, which keeps ``A.B_C`` and ``A_B.C`` apart.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum, auto

from .errors import NameCollisionError

# Keywords that cannot be used as Elm identifiers. Identifiers that match one
# exactly get a trailing underscore; this does not rule out collisions with
# other generated names.
ELM_RESERVED_KEYWORDS = frozenset(
    [
        "as",
        "case",
        "else",
        "exposing",
        "if",
        "import",
        "in",
        "let",
        "module",
        "of",
        "port",
        "then",
        "type",
        "where",
    ]
)

SEPARATOR = "_"


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def camel_case(name: str) -> str:
    """Camel-case a schema identifier, dropping every underscore.

    Lower-case letters following an underscore or a digit are capitalized,
    so ``foo_bar`` becomes ``FooBar`` and ``foo_1`` becomes ``Foo1``. A
    leading underscore becomes ``X``.
    """
    if not name:
        return ""

    out: list[str] = []
    i = 0
    if name[0] == "_":
        out.append("X")
        i = 1

    while i < len(name):
        c = name[i]
        if c == "_" and i + 1 < len(name) and _is_lower(name[i + 1]):
            i += 1
            continue
        if _is_digit(c):
            out.append(c)
            i += 1
            continue
        out.append(c.upper() if _is_lower(c) else c)
        while i + 1 < len(name) and _is_lower(name[i + 1]):
            i += 1
            out.append(name[i])
        i += 1

    return "".join(out).replace("_", "")


def first_upper(name: str) -> str:
    return name[:1].upper() + name[1:]


def first_lower(name: str) -> str:
    return name[:1].lower() + name[1:]


def upper_camel_case(name: str) -> str:
    return first_upper(camel_case(name))


def lower_camel_case(name: str) -> str:
    return first_lower(camel_case(name))


def decoder_name(type_name: str) -> str:
    """Name of the generated JSON decoder for an Elm type."""
    return f"{first_lower(type_name)}Decoder"


def encoder_name(type_name: str) -> str:
    """Name of the generated JSON encoder for an Elm type."""
    return f"{first_lower(type_name)}Encoder"


def default_name(type_name: str) -> str:
    """Name of the generated default-value constant for an enum type."""
    return f"{first_lower(type_name)}Default"


class NameKind(StrEnum):
    """The role an identifier plays in the generated module."""

    TYPE = auto()  # Record aliases, enum types, oneof union types
    FIELD = auto()  # Record fields
    ENUM_VARIANT = auto()
    ONEOF_VARIANT = auto()


@dataclass(frozen=True, slots=True)
class ResolvedName:
    """An Elm identifier derived from a schema name and its nesting path."""

    kind: NameKind
    path: tuple[str, ...]
    schema_name: str
    identifier: str

    def __str__(self) -> str:
        return self.identifier

    @property
    def decoder(self) -> str:
        return decoder_name(self.identifier)

    @property
    def encoder(self) -> str:
        return encoder_name(self.identifier)

    @property
    def default(self) -> str:
        return default_name(self.identifier)


class NameResolver:
    """Derives Elm identifiers for one file's generation pass.

    Results are cached per (kind, nesting path, schema name), so an entity
    referenced in several positions always gets the same identifier.
    """

    def __init__(
        self,
        reserved_keywords: Iterable[str] = ELM_RESERVED_KEYWORDS,
        separator: str = SEPARATOR,
    ) -> None:
        self._reserved = frozenset(reserved_keywords)
        self._separator = separator
        self._cache: dict[tuple[NameKind, tuple[str, ...], str], ResolvedName] = {}

    def resolve(self, kind: NameKind, path: Iterable[str], name: str) -> ResolvedName:
        key = (kind, tuple(path), name)
        resolved = self._cache.get(key)
        if resolved is None:
            resolved = ResolvedName(kind, key[1], name, self._derive(kind, key[1], name))
            self._cache[key] = resolved
        return resolved

    def type_name(self, path: Iterable[str], name: str) -> ResolvedName:
        return self.resolve(NameKind.TYPE, path, name)

    def field_name(self, name: str) -> ResolvedName:
        return self.resolve(NameKind.FIELD, (), name)

    def enum_variant(self, path: Iterable[str], name: str) -> ResolvedName:
        return self.resolve(NameKind.ENUM_VARIANT, path, name)

    def oneof_variant(self, path: Iterable[str], name: str) -> ResolvedName:
        return self.resolve(NameKind.ONEOF_VARIANT, path, name)

    def _derive(self, kind: NameKind, path: tuple[str, ...], name: str) -> str:
        if kind == NameKind.FIELD:
            return self._escape(lower_camel_case(name))
        if kind == NameKind.ENUM_VARIANT:
            name = name.lower()
        segments = [upper_camel_case(segment) for segment in (*path, name)]
        return self._escape(self._separator.join(segments))

    def _escape(self, identifier: str) -> str:
        if identifier in self._reserved:
            return f"{identifier}_"
        return identifier


class Namespace(StrEnum):
    """Elm namespaces in which declared identifiers must be unique."""

    TYPE = auto()
    VALUE = auto()  # Functions, constants and constructors
    FIELD = auto()


class DeclarationTable:
    """Tracks declared identifiers and rejects two entities sharing one."""

    def __init__(self) -> None:
        self._declared: dict[tuple[Namespace, str], str] = {}

    def declare(self, namespace: Namespace, identifier: str, entity: str) -> None:
        """Record that `entity` declares `identifier` in `namespace`.

        Raises:
            NameCollisionError: a different entity already declared it.
        """
        key = (namespace, identifier)
        existing = self._declared.get(key)
        if existing is not None and existing != entity:
            raise NameCollisionError(
                f"{entity} and {existing} both resolve to {namespace} name '{identifier}'"
            )
        self._declared[key] = entity

    def __contains__(self, key: tuple[Namespace, str]) -> bool:
        return key in self._declared
