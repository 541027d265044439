"""Mapping of schema field types to Elm types and codec references.

Dispatch happens on the declared wire type first. Scalars come from a fixed
table; enums and messages resolve through the schema index to the names the
generator declares for them. Well-known wrapper types and explicit overrides
bypass message lowering entirely. The cardinality of the field then decides
how the base mapping is wrapped.
"""

from collections.abc import Mapping
from types import MappingProxyType

from . import runtime
from .descriptor import ProtoField, ProtoMessage, SchemaIndex, WireType
from .errors import MalformedRequestError, MissingDefaultError, UnsupportedSchemaError
from .names import NameResolver, decoder_name, default_name, encoder_name, first_upper
from .options import CustomType, FieldOptions
from .types import Cardinality, FieldType, GeneratedRef, InlineExpr, MappedType, RuntimeRef

_INT = MappedType("Int", runtime.INT_DECODER, runtime.json_encode("int"), InlineExpr("0"))
# proto3 JSON carries 64-bit integers as strings to avoid precision loss.
_INT64 = MappedType("Int", runtime.INT_DECODER, runtime.NUMERIC_STRING_ENCODER, InlineExpr("0"))
_FLOAT = MappedType(
    "Float", runtime.json_decode("float"), runtime.json_encode("float"), InlineExpr("0.0")
)

SCALAR_TYPES: Mapping[int, MappedType] = MappingProxyType(
    {
        WireType.INT32: _INT,
        WireType.UINT32: _INT,
        WireType.SINT32: _INT,
        WireType.FIXED32: _INT,
        WireType.SFIXED32: _INT,
        WireType.INT64: _INT64,
        WireType.UINT64: _INT64,
        WireType.SINT64: _INT64,
        WireType.FIXED64: _INT64,
        WireType.SFIXED64: _INT64,
        WireType.FLOAT: _FLOAT,
        WireType.DOUBLE: _FLOAT,
        WireType.BOOL: MappedType(
            "Bool", runtime.json_decode("bool"), runtime.json_encode("bool"), InlineExpr("False")
        ),
        WireType.STRING: MappedType(
            "String",
            runtime.json_decode("string"),
            runtime.json_encode("string"),
            InlineExpr('""'),
        ),
        WireType.BYTES: MappedType(
            "Bytes", runtime.BYTES_DECODER, runtime.BYTES_ENCODER, InlineExpr("[]")
        ),
    }
)


def _well_known(elm_type: str, decoder: str, encoder: str, default: str | None) -> MappedType:
    return MappedType(
        elm_type,
        runtime.support(decoder),
        runtime.support(encoder),
        InlineExpr(default) if default is not None else None,
    )


WELL_KNOWN_TYPES: Mapping[str, MappedType] = MappingProxyType(
    {
        ".google.protobuf.Timestamp": _well_known(
            "Timestamp", "timestampDecoder", "timestampEncoder", None
        ),
        ".google.protobuf.Int32Value": _well_known(
            "Int", "intValueDecoder", "intValueEncoder", "0"
        ),
        ".google.protobuf.Int64Value": _well_known(
            "Int", "intValueDecoder", "numericStringEncoder", "0"
        ),
        ".google.protobuf.UInt32Value": _well_known(
            "Int", "intValueDecoder", "intValueEncoder", "0"
        ),
        ".google.protobuf.UInt64Value": _well_known(
            "Int", "intValueDecoder", "numericStringEncoder", "0"
        ),
        ".google.protobuf.DoubleValue": _well_known(
            "Float", "floatValueDecoder", "floatValueEncoder", "0.0"
        ),
        ".google.protobuf.FloatValue": _well_known(
            "Float", "floatValueDecoder", "floatValueEncoder", "0.0"
        ),
        ".google.protobuf.StringValue": _well_known(
            "String", "stringValueDecoder", "stringValueEncoder", '""'
        ),
        ".google.protobuf.BytesValue": _well_known(
            "Bytes", "bytesValueDecoder", "bytesValueEncoder", "[]"
        ),
        ".google.protobuf.BoolValue": _well_known(
            "Bool", "boolValueDecoder", "boolValueEncoder", "False"
        ),
    }
)

# Schema files defining the well-known types above. They are never generated.
WELL_KNOWN_FILES = frozenset(["google/protobuf/timestamp.proto", "google/protobuf/wrappers.proto"])


def custom_mapping(custom: CustomType) -> MappedType:
    """Lower an explicit type override from the options file."""
    return MappedType(
        custom.type,
        RuntimeRef(custom.decoder),
        RuntimeRef(custom.encoder),
        InlineExpr(custom.default) if custom.default is not None else None,
    )


def find_map_entry(field: ProtoField, message: ProtoMessage) -> ProtoMessage | None:
    """Return the synthetic map entry type behind `field`, if it is a map.

    protoc lowers ``map<K, V> f`` to a repeated field of a nested ``FEntry``
    message flagged ``map_entry`` with fields ``key`` and ``value``. There is
    no other signal in the descriptor, so the entry is found by matching the
    unqualified type name against the enclosing message's nested types.

    Raises:
        UnsupportedSchemaError: the flagged entry does not have two fields.
    """
    if not field.repeated or field.wire_type != WireType.MESSAGE:
        return None

    for nested in message.nested_messages:
        if nested.name == field.local_type_name and nested.map_entry:
            if len(nested.fields) != 2:
                raise UnsupportedSchemaError(
                    f"map entry {nested.name} has {len(nested.fields)} fields, expected 2"
                )
            return nested
    return None


def _wire_type_label(wire_type: int) -> str:
    try:
        return WireType(wire_type).name
    except ValueError:
        return str(wire_type)


def heuristic_type_name(type_name: str) -> str:
    """Flatten a type reference that is missing from the schema index.

    Segments starting with a lower-case letter are taken to be the package.
    """
    segments = [s for s in type_name.split(".") if s and not s[0].islower()]
    return "_".join(first_upper(s) for s in segments)


class TypeMapper:
    """Maps fields to Elm type expressions and codec references.

    The lookup tables are injected, read-only configuration; nothing is
    mutated after construction.
    """

    def __init__(
        self,
        resolver: NameResolver,
        index: SchemaIndex,
        *,
        scalar_types: Mapping[int, MappedType] = SCALAR_TYPES,
        well_known_types: Mapping[str, MappedType] = WELL_KNOWN_TYPES,
        custom_types: Mapping[str, CustomType] | None = None,
    ) -> None:
        self._resolver = resolver
        self._index = index
        self._scalars = scalar_types
        self._custom = {name: custom_mapping(t) for name, t in (custom_types or {}).items()}
        self._special = {**well_known_types, **self._custom}

    def base_type(self, field: ProtoField, override: FieldOptions | None = None) -> MappedType:
        """Map the declared type of `field`, ignoring its cardinality.

        Raises:
            UnsupportedSchemaError: the wire type has no mapping rule.
            MalformedRequestError: a field override names an unknown type.
        """
        if override is not None and override.type is not None:
            if override.type not in self._custom:
                raise MalformedRequestError(
                    f"field override refers to unknown custom type {override.type}"
                )
            return self._custom[override.type]

        if field.wire_type in (WireType.MESSAGE, WireType.ENUM):
            special = self._special.get(field.type_name)
            if special is not None:
                return special
            return self._reference(field)

        scalar = self._scalars.get(field.wire_type)
        if scalar is None:
            raise UnsupportedSchemaError(
                f"unsupported field type {_wire_type_label(field.wire_type)}"
            )
        return scalar

    def cardinality(
        self, field: ProtoField, message: ProtoMessage, override: FieldOptions | None = None
    ) -> Cardinality:
        """Classify `field` as required, optional, repeated or map.

        Singular message fields always track presence; no default message
        value is ever manufactured for them.
        """
        if field.repeated:
            if find_map_entry(field, message) is not None:
                return Cardinality.MAP
            return Cardinality.REPEATED
        if override is not None and override.required:
            return Cardinality.REQUIRED
        if field.wire_type == WireType.MESSAGE or field.proto3_optional:
            return Cardinality.OPTIONAL
        return Cardinality.REQUIRED

    def field_type(
        self, field: ProtoField, message: ProtoMessage, override: FieldOptions | None = None
    ) -> FieldType:
        """Map `field`, declared in `message`, including its cardinality.

        Raises:
            MissingDefaultError: a required field's type has no default.
        """
        entry = find_map_entry(field, message)
        if entry is not None:
            key, value = entry.fields
            return FieldType(Cardinality.MAP, self.base_type(value), key=self.base_type(key))

        cardinality = self.cardinality(field, message, override)
        base = self.base_type(field, override)
        if cardinality == Cardinality.REQUIRED and base.default is None:
            raise MissingDefaultError(f"type {base.elm_type} has no default value")
        return FieldType(cardinality, base)

    def _reference(self, field: ProtoField) -> MappedType:
        location = self._index.lookup(field.type_name)
        if location is None:
            name = heuristic_type_name(field.type_name)
        else:
            name = self._resolver.type_name(location.path, location.name).identifier

        default = None
        if field.wire_type == WireType.ENUM:
            default = GeneratedRef(default_name(name))
        return MappedType(
            name, GeneratedRef(decoder_name(name)), GeneratedRef(encoder_name(name)), default
        )
