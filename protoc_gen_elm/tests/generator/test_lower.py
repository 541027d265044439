"""Tests for lowering schema files to Elm modules."""

import pytest

from protoc_gen_elm.generator.descriptor import SchemaIndex
from protoc_gen_elm.generator.errors import NameCollisionError, UnsupportedSchemaError
from protoc_gen_elm.generator.lower import lower_file, module_imports, module_name, output_path
from protoc_gen_elm.generator.options import FileOptions, GeneratorOptions, Parameters

PERSON = """
name: "demo/person.proto"
package: "demo"
syntax: "proto3"
message_type {
  name: "Person"
  field { name: "name" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL json_name: "name" }
  field { name: "age" number: 2 type: TYPE_INT32 label: LABEL_OPTIONAL json_name: "age" }
  field { name: "emails" number: 3 type: TYPE_STRING label: LABEL_REPEATED json_name: "emails" }
}
"""

SHAPES = """
name: "demo/shapes.proto"
package: "demo"
syntax: "proto3"
message_type {
  name: "Shape"
  field { name: "id" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL json_name: "id" }
  field {
    name: "circle" number: 2 type: TYPE_MESSAGE label: LABEL_OPTIONAL
    type_name: ".demo.Circle" oneof_index: 0 json_name: "circle"
  }
  field {
    name: "side_length" number: 3 type: TYPE_INT32 label: LABEL_OPTIONAL
    oneof_index: 0 json_name: "sideLength"
  }
  field { name: "label" number: 4 type: TYPE_STRING label: LABEL_OPTIONAL json_name: "label" }
  oneof_decl { name: "kind" }
}
message_type { name: "Circle" }
"""

NESTED = """
name: "demo/outer.proto"
package: "demo"
syntax: "proto3"
message_type {
  name: "Outer"
  field {
    name: "inner" number: 1 type: TYPE_MESSAGE label: LABEL_OPTIONAL
    type_name: ".demo.Outer.Inner" json_name: "inner"
  }
  field {
    name: "color" number: 2 type: TYPE_ENUM label: LABEL_OPTIONAL
    type_name: ".demo.Outer.Color" json_name: "color"
  }
  nested_type {
    name: "Inner"
    field { name: "id" number: 1 type: TYPE_INT64 label: LABEL_OPTIONAL json_name: "id" }
  }
  enum_type {
    name: "Color"
    value { name: "RED" number: 0 }
    value { name: "DARK_BLUE" number: 1 }
  }
}
"""


def lower(parse_file, text, parameters=None, options=None):
    file = parse_file(text)
    return lower_file(file, SchemaIndex([file]), parameters, options)


def describe_messages():
    def lowers_fields_in_declaration_order(expect, parse_file):
        module = lower(parse_file, PERSON)
        fields = module.messages[0].type_alias.fields

        expect([f.name for f in fields]) == ["name", "age", "emails"]
        expect([f.type for f in fields]) == ["String", "Int", "List String"]
        expect([f.number for f in fields]) == [1, 2, 3]

    def decodes_absent_scalars_to_defaults(expect, parse_file):
        fields = lower(parse_file, PERSON).messages[0].type_alias.fields

        expect([f.decoder for f in fields]) == [
            'required "name" JD.string ""',
            'required "age" intDecoder 0',
            'repeated "emails" JD.string',
        ]
        expect(fields[1].encoder) == 'requiredFieldEncoder "age" JE.int 0 v.age'

    def names_codecs_after_the_type(expect, parse_file):
        alias = lower(parse_file, PERSON).messages[0].type_alias

        expect(alias.name) == "Person"
        expect(alias.decoder) == "personDecoder"
        expect(alias.encoder) == "personEncoder"

    def flattens_nested_messages(expect, parse_file):
        block = lower(parse_file, NESTED).messages[0]

        expect(block.type_alias.fields[0].type) == "Maybe Outer_Inner"
        expect(block.nested_messages[0].type_alias.name) == "Outer_Inner"
        expect(block.nested_messages[0].type_alias.decoder) == "outer_InnerDecoder"

    def treats_proto2_required_messages_as_optional(expect, parse_file):
        module = lower(
            parse_file,
            """
            name: "legacy.proto"
            message_type {
              name: "Order"
              field {
                name: "item" number: 1 type: TYPE_MESSAGE label: LABEL_REQUIRED
                type_name: ".Item" json_name: "item"
              }
            }
            message_type { name: "Item" }
            """,
        )

        expect(module.messages[0].type_alias.fields[0].type) == "Maybe Item"

    def skips_map_entry_types(expect, parse_file):
        module = lower(
            parse_file,
            """
            name: "stats.proto"
            syntax: "proto3"
            message_type {
              name: "Stats"
              field {
                name: "counts" number: 1 type: TYPE_MESSAGE label: LABEL_REPEATED
                type_name: ".Stats.CountsEntry" json_name: "counts"
              }
              nested_type {
                name: "CountsEntry"
                options { map_entry: true }
                field { name: "key" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL }
                field { name: "value" number: 2 type: TYPE_INT32 label: LABEL_OPTIONAL }
              }
            }
            """,
        )
        block = module.messages[0]

        expect(module.import_dict) == True
        expect(block.nested_messages) == []
        expect(block.type_alias.fields[0].type) == "Dict.Dict String Int"
        expect(block.type_alias.fields[0].decoder) == 'mapEntries "counts" intDecoder'


def describe_enums():
    def scopes_variants_to_the_enclosing_message(expect, parse_file):
        enum = lower(parse_file, NESTED).messages[0].nested_enums[0]

        expect(enum.name) == "Outer_Color"
        expect([v.name for v in enum.variants]) == ["Outer_Red", "Outer_DarkBlue"]
        expect([v.json_name for v in enum.variants]) == ["RED", "DARK_BLUE"]
        expect(enum.default_variant) == "Outer_Red"
        expect(enum.default_variable) == "outer_ColorDefault"

    def uses_the_enum_default_for_fields(expect, parse_file):
        field = lower(parse_file, NESTED).messages[0].type_alias.fields[1]

        expect(field.type) == "Outer_Color"
        expect(field.decoder) == 'required "color" outer_ColorDecoder outer_ColorDefault'

    def lowers_top_level_enums_without_prefix(expect, parse_file):
        module = lower(
            parse_file,
            """
            name: "color.proto"
            syntax: "proto3"
            enum_type { name: "Color" value { name: "COLOR_RED" number: 0 } }
            """,
        )

        expect(module.enums[0].variants[0].name) == "ColorRed"


def describe_oneofs():
    def places_the_slot_at_the_first_member(expect, parse_file):
        alias = lower(parse_file, SHAPES).messages[0].type_alias

        expect([f.name for f in alias.fields]) == ["id", "kind", "label"]
        expect(alias.fields[1].type) == "Shape_Kind"
        expect(alias.fields[1].decoder) == "field shape_KindDecoder"
        expect(alias.fields[1].encoder) == "shape_KindEncoder v.kind"

    def lowers_members_to_variants(expect, parse_file):
        oneof = lower(parse_file, SHAPES).messages[0].oneofs[0]

        expect(oneof.name) == "Shape_Kind"
        expect(oneof.unspecified) == "Shape_KindUnspecified"
        expect([(v.name, v.type, v.json_name) for v in oneof.variants]) == [
            ("Shape_Circle", "Circle", "circle"),
            ("Shape_SideLength", "Int", "sideLength"),
        ]

    def ignores_synthetic_oneofs(expect, parse_file):
        module = lower(
            parse_file,
            """
            name: "opt.proto"
            syntax: "proto3"
            message_type {
              name: "Profile"
              field {
                name: "nickname" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL
                proto3_optional: true oneof_index: 0 json_name: "nickname"
              }
              oneof_decl { name: "_nickname" }
            }
            """,
        )
        block = module.messages[0]

        expect(block.oneofs) == []
        expect(block.type_alias.fields[0].type) == "Maybe String"
        expect(block.type_alias.fields[0].decoder) == 'optional "nickname" JD.string'


def describe_collisions():
    def rejects_types_flattening_to_one_name(expect, parse_file):
        with pytest.raises(NameCollisionError) as exc:
            lower(
                parse_file,
                """
                name: "clash.proto"
                message_type {
                  name: "A"
                  nested_type { name: "B_c" }
                  nested_type { name: "BC" }
                }
                """,
            )

        expect("A_BC" in str(exc.value)) == True
        expect(exc.value.file) == None

    def rejects_fields_camel_casing_to_one_name(expect, parse_file):
        with pytest.raises(NameCollisionError) as exc:
            lower(
                parse_file,
                """
                name: "clash.proto"
                message_type {
                  name: "A"
                  field { name: "foo_bar" number: 1 type: TYPE_INT32 label: LABEL_OPTIONAL }
                  field { name: "fooBar" number: 2 type: TYPE_INT32 label: LABEL_OPTIONAL }
                }
                """,
            )

        expect("fooBar" in str(exc.value)) == True


def describe_unsupported_schemas():
    def rejects_groups_naming_the_field(expect, parse_file):
        with pytest.raises(UnsupportedSchemaError) as exc:
            lower(
                parse_file,
                """
                name: "old.proto"
                message_type {
                  name: "Old"
                  field { name: "data" number: 1 type: TYPE_GROUP label: LABEL_OPTIONAL }
                }
                """,
            )

        expect(exc.value.entity) == "Old.data"

    def rejects_editions(expect, parse_file):
        with pytest.raises(UnsupportedSchemaError):
            lower(parse_file, 'name: "new.proto" syntax: "editions"')


def describe_remove_deprecated():
    SCHEMA = """
    name: "dep.proto"
    syntax: "proto3"
    message_type {
      name: "Item"
      field { name: "id" number: 1 type: TYPE_INT32 label: LABEL_OPTIONAL }
      field {
        name: "old_id" number: 2 type: TYPE_INT32 label: LABEL_OPTIONAL
        options { deprecated: true }
      }
    }
    message_type { name: "Gone" options { deprecated: true } }
    enum_type {
      name: "State"
      value { name: "ACTIVE" number: 0 }
      value { name: "RETIRED" number: 1 options { deprecated: true } }
    }
    """

    def keeps_deprecated_declarations_by_default(expect, parse_file):
        module = lower(parse_file, SCHEMA)

        expect(len(module.messages)) == 2
        expect(len(module.messages[0].type_alias.fields)) == 2
        expect(len(module.enums[0].variants)) == 2

    def drops_deprecated_declarations(expect, parse_file):
        module = lower(parse_file, SCHEMA, Parameters(remove_deprecated=True))

        expect([m.type_alias.name for m in module.messages]) == ["Item"]
        expect([f.name for f in module.messages[0].type_alias.fields]) == ["id"]
        expect([v.name for v in module.enums[0].variants]) == ["Active"]

    def rejects_enums_left_without_values(expect, parse_file):
        with pytest.raises(UnsupportedSchemaError):
            lower(
                parse_file,
                """
                name: "dep.proto"
                enum_type {
                  name: "State"
                  value { name: "OLD" number: 0 options { deprecated: true } }
                }
                """,
                Parameters(remove_deprecated=True),
            )


def describe_options():
    def forces_required_fields_with_custom_defaults(expect, parse_file):
        options = GeneratorOptions.from_dict(
            {
                "types": {
                    ".demo.Outer.Inner": {
                        "type": "Inner",
                        "decoder": "innerDecoder",
                        "encoder": "innerEncoder",
                        "default": "emptyInner",
                    }
                },
                "files": {
                    "demo/outer.proto": {
                        "imports": ["Inner"],
                        "fields": {"Outer.inner": {"required": True}},
                    }
                },
            }
        )

        module = lower(parse_file, NESTED, options=options)
        inner = module.messages[0].type_alias.fields[0]

        expect(inner.type) == "Inner"
        expect(inner.decoder) == 'required "inner" innerDecoder emptyInner'
        expect(module.imports) == ["Inner"]

    def overrides_oneof_members(expect, parse_file):
        disc = {"type": "Disc", "decoder": "discDecoder", "encoder": "discEncoder"}
        options = GeneratorOptions.from_dict({"types": {".demo.Circle": disc}})

        variant = lower(parse_file, SHAPES, options=options).messages[0].oneofs[0].variants[0]

        expect(variant.type) == "Disc"
        expect(str(variant.decoder)) == "discDecoder"


def describe_module_layout():
    def derives_output_paths(expect):
        expect(output_path("foo/bar_baz.proto")) == "Foo/Bar_baz.elm"
        expect(output_path("person.proto")) == "Person.elm"
        expect(module_name("foo/bar_baz.proto")) == "Foo.Bar_baz"

    def imports_dependencies_except_well_known_files(expect, parse_file):
        file = parse_file(
            """
            name: "shop/order.proto"
            dependency: "google/protobuf/timestamp.proto"
            dependency: "common/money.proto"
            """
        )

        imports = module_imports(file, FileOptions(imports=["Money.Extra", "Common.Money"]))

        expect(imports) == ["Common.Money", "Money.Extra"]

    def records_the_source_file(expect, parse_file):
        module = lower(parse_file, PERSON)

        expect(module.name) == "Demo.Person"
        expect(module.source_file) == "demo/person.proto"
        expect(module.import_dict) == False
