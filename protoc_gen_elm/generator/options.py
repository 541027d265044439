"""Generator parameters and the auxiliary options file."""

from dataclasses import dataclass, field
from pathlib import Path

from dataclasses_json import DataClassJsonMixin

from .errors import MalformedRequestError


@dataclass
class CustomType(DataClassJsonMixin):
    """Explicit lowering for a schema type, replacing the generated one."""

    type: str
    decoder: str
    encoder: str
    default: str | None = None


@dataclass
class FieldOptions(DataClassJsonMixin):
    """Per-field overrides.

    `type` names a key of `GeneratorOptions.types`; `required` forces the
    field to be lowered as singular-required.
    """

    type: str | None = None
    required: bool = False


@dataclass
class FileOptions(DataClassJsonMixin):
    """Per-file overrides, keyed by the schema file's path."""

    imports: list[str] = field(default_factory=list)
    fields: dict[str, FieldOptions] = field(default_factory=dict)


@dataclass
class GeneratorOptions(DataClassJsonMixin):
    """Contents of the options file passed with ``options=<path>``."""

    types: dict[str, CustomType] = field(default_factory=dict)
    files: dict[str, FileOptions] = field(default_factory=dict)

    def for_file(self, name: str) -> FileOptions:
        return self.files.get(name) or FileOptions()


@dataclass(frozen=True)
class Parameters:
    """Flags passed through the compiler's plugin parameter string."""

    remove_deprecated: bool = False
    debug: bool = False
    options_file: Path | None = None


def parse_parameters(parameter: str) -> Parameters:
    """Parse the comma separated parameter string passed through by protoc.

    Raises:
        MalformedRequestError: the string contains an unknown item.
    """
    remove_deprecated = False
    debug = False
    options_file: Path | None = None

    for item in (i.strip() for i in parameter.split(",")):
        if not item:
            continue
        if item == "remove-deprecated":
            remove_deprecated = True
        elif item == "debug":
            debug = True
        elif item.startswith("options="):
            options_file = Path(item.removeprefix("options="))
        else:
            raise MalformedRequestError(f'Unknown parameter: "{item}"')

    return Parameters(remove_deprecated=remove_deprecated, debug=debug, options_file=options_file)


def load_options(path: Path | None) -> GeneratorOptions:
    """Load the options file, or return empty options when none is given.

    Raises:
        MalformedRequestError: the file cannot be read or decoded.
    """
    if path is None:
        return GeneratorOptions()

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedRequestError(f"Could not read options file {path}: {e}") from e

    try:
        return GeneratorOptions.from_json(text)
    except (ValueError, KeyError, TypeError) as e:
        raise MalformedRequestError(f"Invalid options file {path}: {e}") from e
