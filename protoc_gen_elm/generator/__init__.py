"""Elm code generation from protobuf descriptors."""

from .descriptor import ProtoFile as ProtoFile
from .descriptor import SchemaIndex as SchemaIndex
from .errors import *
from .lower import lower_file as lower_file
from .lower import module_name as module_name
from .lower import output_path as output_path
from .names import NameResolver as NameResolver
from .options import GeneratorOptions as GeneratorOptions
from .options import Parameters as Parameters
from .plugin import process_request as process_request
from .render import render as render
from .typemap import TypeMapper as TypeMapper
from .types import *
