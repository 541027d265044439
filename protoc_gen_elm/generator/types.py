"""Type definitions for lowering protobuf schemas to Elm modules."""

from dataclasses import dataclass
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


@dataclass(frozen=True)
class GeneratedRef(DataClassJsonMixin):
    """Reference to a function or constant generated from a schema."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RuntimeRef(DataClassJsonMixin):
    """Reference to a runtime support function.

    `module` is the import alias for Elm library functions (``JD``, ``JE``)
    and None for the ``Protobuf`` support module, which every generated file
    imports exposing all of its names.
    """

    name: str
    module: str | None = None

    def __str__(self) -> str:
        if self.module:
            return f"{self.module}.{self.name}"
        return self.name


@dataclass(frozen=True)
class InlineExpr(DataClassJsonMixin):
    """A literal Elm expression spliced into the output as-is."""

    text: str

    def __str__(self) -> str:
        return self.text


CodecRef = GeneratedRef | RuntimeRef | InlineExpr


class Cardinality(StrEnum):
    """How many values a field holds and how presence is tracked."""

    REQUIRED = auto()  # Singular, absent on the wire when equal to its default
    OPTIONAL = auto()  # Singular with explicit presence (Maybe)
    REPEATED = auto()
    MAP = auto()


@dataclass(frozen=True)
class MappedType:
    """Elm type expression and codec references for a bare schema type."""

    elm_type: str
    decoder: CodecRef
    encoder: CodecRef
    default: CodecRef | None = None


def parenthesized(text: str) -> str:
    """Wrap a multi-word Elm expression so it can stand in argument position."""
    if " " in text and not (text.startswith("(") and text.endswith(")")):
        return f"({text})"
    return text


@dataclass(frozen=True)
class FieldType:
    """A field's base mapping refined by its cardinality.

    For map fields `base` describes the map value and `key` the map key.
    """

    cardinality: Cardinality
    base: MappedType
    key: MappedType | None = None

    def __post_init__(self) -> None:
        if (self.cardinality == Cardinality.MAP) != (self.key is not None):
            raise ValueError("a key type is required for map fields and only for them")

    @property
    def elm_type(self) -> str:
        """Type expression of the record field."""
        value = parenthesized(self.base.elm_type)
        if self.key is not None:
            return f"Dict.Dict {parenthesized(self.key.elm_type)} {value}"
        if self.cardinality == Cardinality.OPTIONAL:
            return f"Maybe {value}"
        if self.cardinality == Cardinality.REPEATED:
            return f"List {value}"
        return self.base.elm_type


@dataclass(frozen=True)
class RecordField(DataClassJsonMixin):
    """A field of an Elm record type alias with its codec fragments."""

    name: str
    type: str
    number: int | None
    decoder: str
    encoder: str


@dataclass(frozen=True)
class TypeAlias(DataClassJsonMixin):
    """An Elm record type alias lowered from a message."""

    name: str
    decoder: str
    encoder: str
    fields: list[RecordField]


@dataclass(frozen=True)
class EnumVariant(DataClassJsonMixin):
    """A variant of an enum custom type."""

    name: str
    number: int
    json_name: str


@dataclass(frozen=True)
class EnumCustomType(DataClassJsonMixin):
    """An Elm custom type lowered from an enum.

    The first variant is the default: unknown JSON strings decode to it.
    """

    name: str
    decoder: str
    encoder: str
    default_variable: str
    default_variant: str
    variants: list[EnumVariant]


@dataclass(frozen=True)
class OneOfVariant(DataClassJsonMixin):
    """A variant of a oneof custom type, one per member field."""

    name: str
    type: str
    json_name: str
    decoder: CodecRef
    encoder: CodecRef


@dataclass(frozen=True)
class OneOfCustomType(DataClassJsonMixin):
    """An Elm custom type lowered from a oneof group."""

    name: str
    unspecified: str
    decoder: str
    encoder: str
    variants: list[OneOfVariant]


@dataclass(frozen=True)
class MessageBlock(DataClassJsonMixin):
    """A message and everything declared inside it, in output order."""

    type_alias: TypeAlias
    nested_enums: list[EnumCustomType]
    oneofs: list[OneOfCustomType]
    nested_messages: list["MessageBlock"]


@dataclass(frozen=True)
class ElmModule(DataClassJsonMixin):
    """A complete lowered Elm module, ready for rendering."""

    name: str
    source_file: str
    import_dict: bool
    imports: list[str]
    enums: list[EnumCustomType]
    messages: list[MessageBlock]
