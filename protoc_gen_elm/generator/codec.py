"""Decode and encode fragments for lowered fields, oneofs and enums.

Record decoders are a pipeline ``decode T |> step |> step``; each field
contributes one step. Record encoders build a list of optional
``( name, value )`` pairs and drop the absent ones, so a field is only
written when it differs from its default, is present, or is non-empty.
"""

from collections.abc import Sequence

from . import runtime
from .errors import MissingDefaultError, UnsupportedSchemaError
from .names import ResolvedName
from .types import (
    Cardinality,
    CodecRef,
    EnumCustomType,
    EnumVariant,
    FieldType,
    MappedType,
    OneOfCustomType,
    OneOfVariant,
    RecordField,
    RuntimeRef,
    TypeAlias,
    parenthesized,
)

# Argument name of every generated record encoder.
ENCODED_VALUE = "v"

_DECODERS: dict[Cardinality, RuntimeRef] = {
    Cardinality.REQUIRED: runtime.REQUIRED,
    Cardinality.OPTIONAL: runtime.OPTIONAL,
    Cardinality.REPEATED: runtime.REPEATED,
    Cardinality.MAP: runtime.MAP_ENTRIES,
}

_ENCODERS: dict[Cardinality, RuntimeRef] = {
    Cardinality.REQUIRED: runtime.REQUIRED_ENCODER,
    Cardinality.OPTIONAL: runtime.OPTIONAL_ENCODER,
    Cardinality.REPEATED: runtime.REPEATED_ENCODER,
    Cardinality.MAP: runtime.MAP_ENTRIES_ENCODER,
}


def string_literal(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def argument(ref: CodecRef) -> str:
    """Render a codec reference in argument position, parenthesized if needed."""
    return parenthesized(str(ref))


def _default(field_type: FieldType) -> CodecRef:
    if field_type.base.default is None:
        raise MissingDefaultError(f"type {field_type.base.elm_type} has no default value")
    return field_type.base.default


def field_decoder(json_name: str, field_type: FieldType) -> str:
    """Pipeline step decoding one record field.

    Required fields fall back to their default when the key is absent; map
    fields decode their values with the value type's decoder.
    """
    args = [str(_DECODERS[field_type.cardinality]), string_literal(json_name)]
    args.append(argument(field_type.base.decoder))
    if field_type.cardinality == Cardinality.REQUIRED:
        args.append(argument(_default(field_type)))
    return " ".join(args)


def field_encoder(json_name: str, field_name: str, field_type: FieldType) -> str:
    """Entry of the encoder's pair list for one record field."""
    args = [str(_ENCODERS[field_type.cardinality]), string_literal(json_name)]
    args.append(argument(field_type.base.encoder))
    if field_type.cardinality == Cardinality.REQUIRED:
        args.append(argument(_default(field_type)))
    args.append(f"{ENCODED_VALUE}.{field_name}")
    return " ".join(args)


def record_field(
    name: ResolvedName, json_name: str, number: int, field_type: FieldType
) -> RecordField:
    return RecordField(
        name=str(name),
        type=field_type.elm_type,
        number=number,
        decoder=field_decoder(json_name, field_type),
        encoder=field_encoder(json_name, str(name), field_type),
    )


def oneof_slot(name: ResolvedName, union: ResolvedName) -> RecordField:
    """The record field holding a oneof group, delegating to the union's codecs."""
    return RecordField(
        name=str(name),
        type=str(union),
        number=None,
        decoder=f"{runtime.FIELD} {union.decoder}",
        encoder=f"{union.encoder} {ENCODED_VALUE}.{name}",
    )


def type_alias(name: ResolvedName, fields: Sequence[RecordField]) -> TypeAlias:
    return TypeAlias(
        name=str(name), decoder=name.decoder, encoder=name.encoder, fields=list(fields)
    )


def oneof_variant(name: ResolvedName, json_name: str, base: MappedType) -> OneOfVariant:
    """A oneof member, typed like a singular field without presence tracking."""
    return OneOfVariant(
        name=str(name),
        type=base.elm_type,
        json_name=json_name,
        decoder=base.decoder,
        encoder=base.encoder,
    )


def oneof_custom_type(name: ResolvedName, variants: Sequence[OneOfVariant]) -> OneOfCustomType:
    return OneOfCustomType(
        name=str(name),
        unspecified=f"{name}Unspecified",
        decoder=name.decoder,
        encoder=name.encoder,
        variants=list(variants),
    )


def variant_decoder(variant: OneOfVariant) -> str:
    """Alternative of the oneof decoder matching `variant`'s JSON key."""
    key = string_literal(variant.json_name)
    return f"JD.map {variant.name} (JD.field {key} {argument(variant.decoder)})"


def variant_encoder(variant: OneOfVariant) -> str:
    """Encoded pair for a value `x` of `variant`."""
    key = string_literal(variant.json_name)
    return f"Just ( {key}, {argument(variant.encoder)} x )"


def enum_custom_type(name: ResolvedName, variants: Sequence[EnumVariant]) -> EnumCustomType:
    """An enum with its codecs. The first variant is the default.

    Raises:
        UnsupportedSchemaError: the enum has no values.
    """
    if not variants:
        raise UnsupportedSchemaError(f"enum {name.schema_name} has no values")

    return EnumCustomType(
        name=str(name),
        decoder=name.decoder,
        encoder=name.encoder,
        default_variable=name.default,
        default_variant=variants[0].name,
        variants=list(variants),
    )
