"""Unit tests configuration file."""

import pytest
from google.protobuf import descriptor_pb2, text_format

from protoc_gen_elm.generator.descriptor import ProtoFile, ProtoMessage


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def parse_file():
    """Build a file view from a FileDescriptorProto in text format."""

    def parse(text: str) -> ProtoFile:
        return ProtoFile.from_proto(text_format.Parse(text, descriptor_pb2.FileDescriptorProto()))

    return parse


@pytest.fixture
def parse_message():
    """Build a message view from a DescriptorProto in text format."""

    def parse(text: str) -> ProtoMessage:
        return ProtoMessage.from_proto(text_format.Parse(text, descriptor_pb2.DescriptorProto()))

    return parse
