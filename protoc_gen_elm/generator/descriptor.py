"""Read-only views over protobuf file descriptors.

The compiler hands the plugin ``FileDescriptorProto`` messages. These
dataclasses copy out the parts the generator needs so the rest of the engine
works on plain, immutable Python values.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import IntEnum, StrEnum, auto

from google.protobuf import descriptor_pb2

_FieldProto = descriptor_pb2.FieldDescriptorProto


class WireType(IntEnum):
    """Declared field types, numbered as in ``FieldDescriptorProto.Type``."""

    DOUBLE = _FieldProto.TYPE_DOUBLE
    FLOAT = _FieldProto.TYPE_FLOAT
    INT64 = _FieldProto.TYPE_INT64
    UINT64 = _FieldProto.TYPE_UINT64
    INT32 = _FieldProto.TYPE_INT32
    FIXED64 = _FieldProto.TYPE_FIXED64
    FIXED32 = _FieldProto.TYPE_FIXED32
    BOOL = _FieldProto.TYPE_BOOL
    STRING = _FieldProto.TYPE_STRING
    GROUP = _FieldProto.TYPE_GROUP
    MESSAGE = _FieldProto.TYPE_MESSAGE
    BYTES = _FieldProto.TYPE_BYTES
    UINT32 = _FieldProto.TYPE_UINT32
    ENUM = _FieldProto.TYPE_ENUM
    SFIXED32 = _FieldProto.TYPE_SFIXED32
    SFIXED64 = _FieldProto.TYPE_SFIXED64
    SINT32 = _FieldProto.TYPE_SINT32
    SINT64 = _FieldProto.TYPE_SINT64


class Label(IntEnum):
    """Declared field labels, numbered as in ``FieldDescriptorProto.Label``."""

    OPTIONAL = _FieldProto.LABEL_OPTIONAL
    REQUIRED = _FieldProto.LABEL_REQUIRED
    REPEATED = _FieldProto.LABEL_REPEATED


def json_name(name: str) -> str:
    """Compute the proto3 JSON name of a field the way protoc does."""
    result: list[str] = []
    capitalize_next = False
    for c in name:
        if c == "_":
            capitalize_next = True
        elif capitalize_next:
            result.append(c.upper())
            capitalize_next = False
        else:
            result.append(c)
    return "".join(result)


@dataclass(frozen=True, slots=True)
class ProtoField:
    """A message field.

    `wire_type` is kept as the raw descriptor number so that types this
    generator does not know about reach the type mapper, which rejects them.
    """

    name: str
    number: int
    wire_type: int
    label: int
    type_name: str
    json_name: str
    oneof_index: int | None
    proto3_optional: bool
    deprecated: bool

    @property
    def repeated(self) -> bool:
        return self.label == Label.REPEATED

    @property
    def local_type_name(self) -> str:
        """Unqualified name of the referenced message or enum type."""
        return self.type_name.rsplit(".", 1)[-1]

    @classmethod
    def from_proto(cls, proto: descriptor_pb2.FieldDescriptorProto) -> "ProtoField":
        return cls(
            name=proto.name,
            number=proto.number,
            wire_type=proto.type,
            label=proto.label,
            type_name=proto.type_name,
            json_name=proto.json_name or json_name(proto.name),
            oneof_index=proto.oneof_index if proto.HasField("oneof_index") else None,
            proto3_optional=proto.proto3_optional,
            deprecated=proto.options.deprecated,
        )


@dataclass(frozen=True, slots=True)
class ProtoOneOf:
    """A oneof group and its member fields, in declaration order.

    Proto3 ``optional`` fields are wrapped by protoc in a synthetic oneof of
    their own; those groups are marked `synthetic` and are not lowered.
    """

    name: str
    index: int
    fields: tuple[ProtoField, ...]

    @property
    def synthetic(self) -> bool:
        return len(self.fields) == 1 and self.fields[0].proto3_optional


@dataclass(frozen=True, slots=True)
class ProtoEnumValue:
    """A symbolic enum value with its wire number."""

    name: str
    number: int
    deprecated: bool


@dataclass(frozen=True, slots=True)
class ProtoEnum:
    """An enum definition. The first declared value is the default."""

    name: str
    values: tuple[ProtoEnumValue, ...]
    deprecated: bool

    @classmethod
    def from_proto(cls, proto: descriptor_pb2.EnumDescriptorProto) -> "ProtoEnum":
        return cls(
            name=proto.name,
            values=tuple(
                ProtoEnumValue(name=v.name, number=v.number, deprecated=v.options.deprecated)
                for v in proto.value
            ),
            deprecated=proto.options.deprecated,
        )


@dataclass(frozen=True, slots=True)
class ProtoMessage:
    """A message definition with its nested declarations."""

    name: str
    fields: tuple[ProtoField, ...]
    oneofs: tuple[ProtoOneOf, ...]
    nested_messages: tuple["ProtoMessage", ...]
    nested_enums: tuple[ProtoEnum, ...]
    map_entry: bool
    deprecated: bool

    @classmethod
    def from_proto(cls, proto: descriptor_pb2.DescriptorProto) -> "ProtoMessage":
        fields = tuple(ProtoField.from_proto(f) for f in proto.field)
        oneofs = tuple(
            ProtoOneOf(
                name=decl.name,
                index=index,
                fields=tuple(f for f in fields if f.oneof_index == index),
            )
            for index, decl in enumerate(proto.oneof_decl)
        )
        return cls(
            name=proto.name,
            fields=fields,
            oneofs=oneofs,
            nested_messages=tuple(cls.from_proto(m) for m in proto.nested_type),
            nested_enums=tuple(ProtoEnum.from_proto(e) for e in proto.enum_type),
            map_entry=proto.options.map_entry,
            deprecated=proto.options.deprecated,
        )

    def oneof_of(self, field: ProtoField) -> ProtoOneOf | None:
        """The non-synthetic oneof group `field` belongs to, if any."""
        if field.oneof_index is None:
            return None
        oneof = self.oneofs[field.oneof_index]
        return None if oneof.synthetic else oneof

    def has_map_entries(self) -> bool:
        return self.map_entry or any(m.has_map_entries() for m in self.nested_messages)


@dataclass(frozen=True, slots=True)
class ProtoFile:
    """A schema file: package, top-level declarations and imports."""

    name: str
    package: str
    syntax: str
    messages: tuple[ProtoMessage, ...]
    enums: tuple[ProtoEnum, ...]
    dependencies: tuple[str, ...]

    @classmethod
    def from_proto(cls, proto: descriptor_pb2.FileDescriptorProto) -> "ProtoFile":
        return cls(
            name=proto.name,
            package=proto.package,
            syntax=proto.syntax or "proto2",
            messages=tuple(ProtoMessage.from_proto(m) for m in proto.message_type),
            enums=tuple(ProtoEnum.from_proto(e) for e in proto.enum_type),
            dependencies=tuple(proto.dependency),
        )

    def has_map_entries(self) -> bool:
        return any(m.has_map_entries() for m in self.messages)


class TypeKind(StrEnum):
    """Kind of a declared schema type."""

    MESSAGE = auto()
    ENUM = auto()


@dataclass(frozen=True, slots=True)
class TypeLocation:
    """Where a type is declared: its package, enclosing messages and name."""

    full_name: str
    file: str
    package: str
    path: tuple[str, ...]
    name: str
    kind: TypeKind


class SchemaIndex:
    """Lookup of every declared type by its fully-qualified name.

    Built once per request from all files, including files supplied only
    as imports, so references into other files resolve by declared name.
    """

    def __init__(self, files: Iterable[ProtoFile]) -> None:
        self._types: dict[str, TypeLocation] = {}
        for file in files:
            for location in _walk_file(file):
                self._types[location.full_name] = location

    def lookup(self, full_name: str) -> TypeLocation | None:
        return self._types.get(full_name)

    def __contains__(self, full_name: str) -> bool:
        return full_name in self._types

    def __len__(self) -> int:
        return len(self._types)


def _walk_file(file: ProtoFile) -> Iterator[TypeLocation]:
    prefix = f".{file.package}" if file.package else ""

    def location(path: tuple[str, ...], name: str, kind: TypeKind) -> TypeLocation:
        full_name = ".".join([prefix, *path, name])
        return TypeLocation(full_name, file.name, file.package, path, name, kind)

    def walk_message(path: tuple[str, ...], message: ProtoMessage) -> Iterator[TypeLocation]:
        yield location(path, message.name, TypeKind.MESSAGE)
        inner = (*path, message.name)
        for enum in message.nested_enums:
            yield location(inner, enum.name, TypeKind.ENUM)
        for nested in message.nested_messages:
            yield from walk_message(inner, nested)

    for enum in file.enums:
        yield location((), enum.name, TypeKind.ENUM)
    for message in file.messages:
        yield from walk_message((), message)
