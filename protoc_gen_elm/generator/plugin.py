"""protoc plugin adapter.

Turns a ``CodeGeneratorRequest`` into a ``CodeGeneratorResponse`` holding one
Elm module per requested schema file. Every file in the request feeds the
schema index, so types imported from other files resolve by declared name,
but only files listed in ``file_to_generate`` produce output.
"""

import logging

from google.protobuf import text_format
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from .descriptor import ProtoFile, SchemaIndex
from .errors import GenerationError, MalformedRequestError
from .lower import lower_file, output_path
from .options import GeneratorOptions, Parameters, load_options, parse_parameters
from .render import render
from .typemap import WELL_KNOWN_FILES

logger = logging.getLogger(__name__)


def parse_request(data: bytes) -> plugin_pb2.CodeGeneratorRequest:
    """Decode a serialized request.

    Raises:
        MalformedRequestError: `data` is not a valid request.
    """
    try:
        return plugin_pb2.CodeGeneratorRequest.FromString(data)
    except DecodeError as e:
        raise MalformedRequestError(f"Could not decode CodeGeneratorRequest: {e}") from e


def _log_request(request: plugin_pb2.CodeGeneratorRequest) -> None:
    stripped = plugin_pb2.CodeGeneratorRequest()
    stripped.CopyFrom(request)
    for proto_file in stripped.proto_file:
        proto_file.ClearField("source_code_info")
    logger.debug("Request:\n%s", text_format.MessageToString(stripped))


def generate_file(
    file: ProtoFile,
    index: SchemaIndex,
    parameters: Parameters,
    options: GeneratorOptions,
) -> str:
    """Lower and render a single schema file."""
    module = lower_file(file, index, parameters, options)
    if parameters.debug:
        logger.debug("Lowered %s:\n%s", file.name, module.to_json(indent=2))
    return render(module)


def process_request(
    request: plugin_pb2.CodeGeneratorRequest, parameters: Parameters | None = None
) -> plugin_pb2.CodeGeneratorResponse:
    """Generate Elm modules for every file the compiler asked for.

    Raises:
        GenerationError: any file failed; the error names the file.
    """
    if parameters is None:
        parameters = parse_parameters(request.parameter)
    options = load_options(parameters.options_file)
    if parameters.debug:
        _log_request(request)

    files = {proto.name: ProtoFile.from_proto(proto) for proto in request.proto_file}
    index = SchemaIndex(files.values())

    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features |= plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    for name in request.file_to_generate:
        if name in WELL_KNOWN_FILES:
            logger.info("Skipping well-known type file %s", name)
            continue

        file = files.get(name)
        if file is None:
            raise MalformedRequestError(f"{name} is listed for generation but was not provided")

        logger.info("Processing file %s", name)
        try:
            content = generate_file(file, index, parameters, options)
        except GenerationError as e:
            raise e.in_file(name)

        generated = response.file.add()
        generated.name = output_path(name)
        generated.content = content
        logger.info("Generated %s", generated.name)

    return response
