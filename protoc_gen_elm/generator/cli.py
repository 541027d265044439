"""Command-line interface for protoc-gen-elm."""

import json
import logging
import sys
from collections.abc import Iterator

import click
from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from protoc_gen_elm import __version__
from protoc_gen_elm.generator.descriptor import ProtoFile, SchemaIndex
from protoc_gen_elm.generator.errors import GenerationError, MalformedRequestError
from protoc_gen_elm.generator.lower import lower_file, output_path
from protoc_gen_elm.generator.options import Parameters, parse_parameters
from protoc_gen_elm.generator.plugin import parse_request, process_request
from protoc_gen_elm.generator.typemap import WELL_KNOWN_FILES
from protoc_gen_elm.generator.types import ElmModule, MessageBlock

logger = logging.getLogger(__name__)

USAGE = """\
protoc-gen-elm is a protoc plugin, it is not intended for direct use.

Usage:
  protoc --elm_out=./gen --elm_opt=remove-deprecated your_file.proto
"""


def _setup_logging(debug: bool = False) -> None:
    # stdout carries the binary response, so logs always go to stderr.
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="protoc-gen-elm")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Elm code generator plugin for protoc.

    Without a command, reads a CodeGeneratorRequest from stdin and writes
    a CodeGeneratorResponse to stdout.
    """
    if ctx.invoked_subcommand is not None:
        return

    stdin = sys.stdin.buffer
    if stdin.isatty():
        click.echo(USAGE, err=True, nl=False)
        sys.exit(1)

    _setup_logging()
    try:
        request = parse_request(stdin.read())
        parameters = parse_parameters(request.parameter)
        if parameters.debug:
            _setup_logging(debug=True)
        response = process_request(request, parameters)
    except GenerationError as e:
        logger.critical("%s", e)
        sys.exit(1)

    stdout = sys.stdout.buffer
    stdout.write(response.SerializeToString())
    stdout.flush()


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="FileDescriptorSet written by protoc --descriptor_set_out",
)
@click.option("--remove-deprecated", is_flag=True, help="Drop deprecated declarations")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, remove_deprecated: bool, output_json: bool) -> None:
    """Display the Elm declarations generated for each schema file."""
    _setup_logging()
    with open(input_file, "rb") as f:
        data = f.read()

    try:
        modules = _lower_descriptor_set(data, Parameters(remove_deprecated=remove_deprecated))
    except GenerationError as e:
        logger.critical("%s", e)
        sys.exit(1)

    if output_json:
        _output_json(modules)
    else:
        _output_plain(modules)


def _lower_descriptor_set(data: bytes, parameters: Parameters) -> list[ElmModule]:
    try:
        descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(data)
    except DecodeError as e:
        raise MalformedRequestError(f"Could not decode FileDescriptorSet: {e}") from e

    files = [ProtoFile.from_proto(proto) for proto in descriptor_set.file]
    index = SchemaIndex(files)

    modules = []
    for file in files:
        if file.name in WELL_KNOWN_FILES:
            continue
        try:
            modules.append(lower_file(file, index, parameters))
        except GenerationError as e:
            raise e.in_file(file.name)
    return modules


def _declarations(module: ElmModule) -> Iterator[tuple[str, str, str, str]]:
    """(kind, type, decoder, encoder) of every type declared by `module`."""

    def walk(block: MessageBlock) -> Iterator[tuple[str, str, str, str]]:
        alias = block.type_alias
        yield "message", alias.name, alias.decoder, alias.encoder
        for enum in block.nested_enums:
            yield "enum", enum.name, enum.decoder, enum.encoder
        for oneof in block.oneofs:
            yield "oneof", oneof.name, oneof.decoder, oneof.encoder
        for nested in block.nested_messages:
            yield from walk(nested)

    for enum in module.enums:
        yield "enum", enum.name, enum.decoder, enum.encoder
    for block in module.messages:
        yield from walk(block)


def _output_json(modules: list[ElmModule]) -> None:
    data = {
        module.source_file: {
            "module": module.name,
            "path": output_path(module.source_file),
            "declarations": [
                {"kind": kind, "type": name, "decoder": decoder, "encoder": encoder}
                for kind, name, decoder, encoder in _declarations(module)
            ],
        }
        for module in modules
    }
    print(json.dumps(data, indent=2))


def _output_plain(modules: list[ElmModule]) -> None:
    """Output declarations using rich text formatting."""
    console = Console()

    for module in modules:
        console.print(
            f"[bold cyan]{module.name}[/bold cyan] [dim]({module.source_file})[/dim]"
        )

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Kind", style="dim")
        table.add_column("Type", style="white")
        table.add_column("Decoder", style="green")
        table.add_column("Encoder", style="yellow")

        for row in _declarations(module):
            table.add_row(*row)

        console.print(table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
