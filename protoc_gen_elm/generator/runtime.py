"""The runtime support contract of generated Elm code.

Generated modules import ``Protobuf exposing (..)`` and call the functions
below. Output is only valid against a support module exposing exactly these
names with these arities.
"""

from types import MappingProxyType

from .types import RuntimeRef

RUNTIME_MODULE = "Protobuf"

# Name -> arity of every Protobuf function the generator may reference.
CONTRACT = MappingProxyType(
    {
        # Decode pipeline
        "decode": 1,
        "required": 4,
        "optional": 3,
        "repeated": 3,
        "mapEntries": 3,
        "field": 2,
        # Encoders producing Maybe ( String, JE.Value )
        "requiredFieldEncoder": 4,
        "optionalEncoder": 3,
        "repeatedFieldEncoder": 3,
        "mapEntriesFieldEncoder": 3,
        # Scalar codecs
        "intDecoder": 0,
        "numericStringEncoder": 1,
        "bytesFieldDecoder": 0,
        "bytesFieldEncoder": 1,
        # Well-known types
        "timestampDecoder": 0,
        "timestampEncoder": 1,
        "intValueDecoder": 0,
        "intValueEncoder": 1,
        "floatValueDecoder": 0,
        "floatValueEncoder": 1,
        "stringValueDecoder": 0,
        "stringValueEncoder": 1,
        "boolValueDecoder": 0,
        "boolValueEncoder": 1,
        "bytesValueDecoder": 0,
        "bytesValueEncoder": 1,
    }
)


def support(name: str) -> RuntimeRef:
    """Reference a function of the Protobuf support module."""
    if name not in CONTRACT:
        raise KeyError(f"{name} is not part of the {RUNTIME_MODULE} runtime contract")
    return RuntimeRef(name)


def json_decode(name: str) -> RuntimeRef:
    return RuntimeRef(name, module="JD")


def json_encode(name: str) -> RuntimeRef:
    return RuntimeRef(name, module="JE")


DECODE = support("decode")
REQUIRED = support("required")
OPTIONAL = support("optional")
REPEATED = support("repeated")
MAP_ENTRIES = support("mapEntries")
FIELD = support("field")

REQUIRED_ENCODER = support("requiredFieldEncoder")
OPTIONAL_ENCODER = support("optionalEncoder")
REPEATED_ENCODER = support("repeatedFieldEncoder")
MAP_ENTRIES_ENCODER = support("mapEntriesFieldEncoder")

INT_DECODER = support("intDecoder")
NUMERIC_STRING_ENCODER = support("numericStringEncoder")
BYTES_DECODER = support("bytesFieldDecoder")
BYTES_ENCODER = support("bytesFieldEncoder")
