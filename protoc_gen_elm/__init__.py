"""protoc-gen-elm - Elm code generator plugin for the protocol buffer compiler."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protoc-gen-elm")
except PackageNotFoundError:
    __version__ = "(local)"
