"""Lowering of one schema file to an Elm module.

The descriptor tree is walked depth-first in declaration order. The nesting
path of every declaration is passed down explicitly so that names are
flattened from where a type is declared, not from any traversal state.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TypeVar

from . import codec
from .descriptor import (
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoFile,
    ProtoMessage,
    ProtoOneOf,
    SchemaIndex,
)
from .errors import GenerationError, UnsupportedSchemaError
from .names import DeclarationTable, Namespace, NameResolver, ResolvedName, first_upper
from .options import FileOptions, GeneratorOptions, Parameters
from .typemap import WELL_KNOWN_FILES, TypeMapper
from .types import (
    ElmModule,
    EnumCustomType,
    EnumVariant,
    MessageBlock,
    OneOfCustomType,
    RecordField,
)

logger = logging.getLogger(__name__)

SUPPORTED_SYNTAX = frozenset(["proto2", "proto3"])

T = TypeVar("T", ProtoEnum, ProtoEnumValue, ProtoMessage, ProtoField)


def _module_segments(proto_name: str) -> list[str]:
    return [first_upper(s) for s in proto_name.removesuffix(".proto").split("/")]


def output_path(proto_name: str) -> str:
    """Path of the generated file, e.g. ``foo/bar_baz.proto`` -> ``Foo/Bar_baz.elm``."""
    return "/".join(_module_segments(proto_name)) + ".elm"


def module_name(proto_name: str) -> str:
    """Elm module name of the generated file, e.g. ``Foo.Bar_baz``."""
    return ".".join(_module_segments(proto_name))


def module_imports(file: ProtoFile, options: FileOptions) -> list[str]:
    """Modules imported ``exposing (..)``: dependencies, then configured extras."""
    imports = [module_name(dep) for dep in file.dependencies if dep not in WELL_KNOWN_FILES]
    for extra in options.imports:
        if extra not in imports:
            imports.append(extra)
    return imports


def _qualified(path: Sequence[str], name: str) -> str:
    return ".".join([*path, name])


@contextmanager
def _lowering(entity: str) -> Iterator[None]:
    """Attach `entity` to generation errors raised inside the block."""
    try:
        yield
    except GenerationError as e:
        raise e.at(entity)


class FileLowering:
    """Lowers a single schema file.

    Every instance owns its name cache and declaration table, so files can
    be lowered independently of each other.
    """

    def __init__(
        self,
        file: ProtoFile,
        index: SchemaIndex,
        *,
        remove_deprecated: bool = False,
        options: GeneratorOptions | None = None,
    ) -> None:
        options = options or GeneratorOptions()
        self.file = file
        self.remove_deprecated = remove_deprecated
        self.file_options = options.for_file(file.name)
        self.resolver = NameResolver()
        self.mapper = TypeMapper(self.resolver, index, custom_types=options.types)
        self.declarations = DeclarationTable()

    def lower(self) -> ElmModule:
        """Lower the whole file.

        Raises:
            UnsupportedSchemaError: the file uses an unsupported syntax.
        """
        if self.file.syntax not in SUPPORTED_SYNTAX:
            raise UnsupportedSchemaError(f"unsupported syntax {self.file.syntax!r}")

        enums = [self._enum((), e) for e in self._kept(self.file.enums)]
        messages = [self._message((), m) for m in self._kept(self.file.messages)]
        logger.debug(
            "Lowered %d enums and %d messages from %s", len(enums), len(messages), self.file.name
        )

        return ElmModule(
            name=module_name(self.file.name),
            source_file=self.file.name,
            import_dict=self.file.has_map_entries(),
            imports=module_imports(self.file, self.file_options),
            enums=enums,
            messages=messages,
        )

    def _kept(self, items: Sequence[T]) -> list[T]:
        if not self.remove_deprecated:
            return list(items)
        return [i for i in items if not i.deprecated]

    def _declare_codecs(self, name: ResolvedName, entity: str) -> None:
        self.declarations.declare(Namespace.TYPE, str(name), entity)
        self.declarations.declare(Namespace.VALUE, name.decoder, entity)
        self.declarations.declare(Namespace.VALUE, name.encoder, entity)

    def _enum(self, path: tuple[str, ...], enum: ProtoEnum) -> EnumCustomType:
        qualified = _qualified(path, enum.name)
        with _lowering(qualified):
            name = self.resolver.type_name(path, enum.name)
            entity = f"enum {qualified}"
            self._declare_codecs(name, entity)
            self.declarations.declare(Namespace.VALUE, name.default, entity)

            variants = []
            for value in self._kept(enum.values):
                # Enum values are scoped to the enum's parent, not the enum.
                variant = self.resolver.enum_variant(path, value.name)
                self.declarations.declare(
                    Namespace.VALUE, str(variant), f"enum value {qualified}.{value.name}"
                )
                variants.append(EnumVariant(str(variant), value.number, value.name))

            return codec.enum_custom_type(name, variants)

    def _message(self, path: tuple[str, ...], message: ProtoMessage) -> MessageBlock:
        qualified = _qualified(path, message.name)
        with _lowering(qualified):
            name = self.resolver.type_name(path, message.name)
            entity = f"message {qualified}"
            self._declare_codecs(name, entity)
            self.declarations.declare(Namespace.VALUE, str(name), entity)

            inner = (*path, message.name)
            record_fields: list[RecordField] = []
            oneofs: list[OneOfCustomType] = []
            seen_oneofs: set[int] = set()
            field_names = DeclarationTable()

            for field in self._kept(message.fields):
                oneof = message.oneof_of(field)
                if oneof is None:
                    with _lowering(_qualified(inner, field.name)):
                        record = self._field(inner, message, field)
                        field_names.declare(
                            Namespace.FIELD, record.name, f"field {_qualified(inner, field.name)}"
                        )
                    record_fields.append(record)
                elif oneof.index not in seen_oneofs:
                    # The group takes the position of its first member.
                    seen_oneofs.add(oneof.index)
                    union, slot = self._oneof(inner, oneof)
                    field_names.declare(
                        Namespace.FIELD, slot.name, f"oneof {_qualified(inner, oneof.name)}"
                    )
                    oneofs.append(union)
                    record_fields.append(slot)

            nested_enums = [self._enum(inner, e) for e in self._kept(message.nested_enums)]
            nested_messages = [
                self._message(inner, m)
                for m in self._kept(message.nested_messages)
                if not m.map_entry
            ]

            return MessageBlock(
                type_alias=codec.type_alias(name, record_fields),
                nested_enums=nested_enums,
                oneofs=oneofs,
                nested_messages=nested_messages,
            )

    def _field(
        self, path: tuple[str, ...], message: ProtoMessage, field: ProtoField
    ) -> RecordField:
        override = self.file_options.fields.get(_qualified(path, field.name))
        field_type = self.mapper.field_type(field, message, override)
        name = self.resolver.field_name(field.name)
        return codec.record_field(name, field.json_name, field.number, field_type)

    def _oneof(
        self, path: tuple[str, ...], oneof: ProtoOneOf
    ) -> tuple[OneOfCustomType, RecordField]:
        qualified = _qualified(path, oneof.name)
        with _lowering(qualified):
            union = self.resolver.type_name(path, oneof.name)
            entity = f"oneof {qualified}"
            self._declare_codecs(union, entity)

            variants = []
            for field in self._kept(oneof.fields):
                member = _qualified(path, field.name)
                with _lowering(member):
                    variant = self.resolver.oneof_variant(path, field.name)
                    self.declarations.declare(Namespace.VALUE, str(variant), f"field {member}")
                    override = self.file_options.fields.get(member)
                    base = self.mapper.base_type(field, override)
                    variants.append(codec.oneof_variant(variant, field.json_name, base))

            custom = codec.oneof_custom_type(union, variants)
            self.declarations.declare(Namespace.VALUE, custom.unspecified, entity)
            return custom, codec.oneof_slot(self.resolver.field_name(oneof.name), union)


def lower_file(
    file: ProtoFile,
    index: SchemaIndex,
    parameters: Parameters | None = None,
    options: GeneratorOptions | None = None,
) -> ElmModule:
    """Lower `file` to an Elm module, resolving references through `index`."""
    parameters = parameters or Parameters()
    lowering = FileLowering(
        file, index, remove_deprecated=parameters.remove_deprecated, options=options
    )
    return lowering.lower()
