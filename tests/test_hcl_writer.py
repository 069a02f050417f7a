"""
Tests for the HCL writer.
"""

import pytest

from kcp.hcl.writer import (
    Block,
    conditional,
    function_call,
    heredoc,
    quote,
    ref,
    render,
    render_attributes,
    render_value,
    string_template,
    var,
)


class TestRenderValue:
    """Tests for rendering Python values as HCL."""

    def test_scalars(self):
        assert render_value(True) == "true"
        assert render_value(False) == "false"
        assert render_value(None) == "null"
        assert render_value(3) == "3"
        assert render_value("text") == '"text"'

    def test_quote_escapes_interpolation(self):
        assert quote("${var.x}") == '"$${var.x}"'
        assert quote("%{ for }") == '"%%{ for }"'
        assert quote('a "b"\nc') == '"a \\"b\\"\\nc"'

    def test_simple_list(self):
        assert render_value(["a", var("b")]) == '["a", var.b]'
        assert render_value([]) == "[]"

    def test_object_keys_aligned(self):
        assert render_value({"a": 1, "bbb": "x"}) == '{\n  a   = 1\n  bbb = "x"\n}'

    def test_object_quotes_unusual_keys(self):
        assert render_value({"Name.Tag": 1}) == '{\n  "Name.Tag" = 1\n}'

    def test_list_of_objects(self):
        rendered = render_value([{"id": "1"}])
        assert rendered == '[\n  {\n    id = "1"\n  },\n]'

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            render_value(object())


class TestExpressions:
    """Tests for raw expressions."""

    def test_string_template_keeps_interpolation(self):
        assert string_template("${path.module}/a.tpl").render() == '"${path.module}/a.tpl"'

    def test_function_call(self):
        call = function_call("templatefile", string_template("${path.module}/a.tpl"), {})
        assert call.render() == 'templatefile("${path.module}/a.tpl", {})'

    def test_conditional(self):
        assert conditional("var.create", 1, 0).render() == "var.create ? 1 : 0"

    def test_heredoc(self):
        assert heredoc("echo hi\n", "EOF").render() == "<<-EOF\necho hi\nEOF"

    def test_expression_equality(self):
        assert ref("a.b") == ref("a.b")
        assert ref("a.b") != ref("a.c")


class TestBlock:
    """Tests for block rendering."""

    def test_resource_block(self):
        block = Block("resource", "aws_subnet", "public")
        block.set("vpc_id", var("vpc_id"))
        block.set("cidr_block", "10.0.0.0/24")

        assert block.render() == (
            'resource "aws_subnet" "public" {\n'
            "  vpc_id     = var.vpc_id\n"
            '  cidr_block = "10.0.0.0/24"\n'
            "}"
        )

    def test_nested_block_and_blank_line(self):
        block = Block("resource", "aws_instance", "proxy")
        block.set("ami", ref("data.aws_ami.ubuntu.id"))
        block.newline()
        lifecycle = block.block("lifecycle")
        lifecycle.set("create_before_destroy", True)

        assert block.render() == (
            'resource "aws_instance" "proxy" {\n'
            "  ami = data.aws_ami.ubuntu.id\n"
            "\n"
            "  lifecycle {\n"
            "    create_before_destroy = true\n"
            "  }\n"
            "}"
        )

    def test_set_replaces_in_place(self):
        block = Block("locals")
        block.set("a", 1).set("b", 2).set("a", 3)
        assert block.get("a") == 3
        assert block.render() == "locals {\n  a = 3\n  b = 2\n}"

    def test_empty_block(self):
        assert Block("provider", "aws").render() == 'provider "aws" {\n}'

    def test_address(self):
        assert Block("resource", "confluent_service_account", "alice").address == (
            "confluent_service_account.alice"
        )
        assert Block("data", "aws_ami", "ubuntu").address == "data.aws_ami.ubuntu"

    def test_render_is_deterministic(self):
        def build():
            block = Block("resource", "null_resource", "link")
            block.set("triggers", {"b": "2", "a": "1"})
            return render([block, Block("locals")])

        assert build() == build()
        assert build().endswith("}\n")
        assert "}\n\nlocals {" in build()

    def test_render_attributes(self):
        assert render_attributes({"a": "x", "long_name": 1}) == 'a         = "x"\nlong_name = 1\n'

    def test_render_nothing(self):
        assert render([]) == ""
