"""Elm source rendering for lowered modules."""

from jinja2 import Environment, PackageLoader

from . import codec, runtime
from .types import ElmModule

env = Environment(
    loader=PackageLoader("protoc_gen_elm.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

# Macros are imported across templates without context, so helpers are globals.
env.globals.update(
    decode=runtime.DECODE,
    argument=codec.argument,
    string_literal=codec.string_literal,
    variant_decoder=codec.variant_decoder,
    variant_encoder=codec.variant_encoder,
)

template = env.get_template("module.elm.j2")


def render(module: ElmModule) -> str:
    """Render a lowered module to Elm source code.

    Output order is the header, top-level enums, then one block per
    top-level message. Each message block is followed by its nested enums,
    its oneof types and its nested messages, depth-first.
    """
    return template.render(module=module, runtime_module=runtime.RUNTIME_MODULE)
