"""
Minimal HCL writer used by every Terraform generator.

Blocks keep attributes, nested blocks and blank lines in insertion order so
that rendering the same input always produces the same text.
"""

from collections.abc import Iterable
from typing import Any

INDENT = "  "


class Expression:
    """A value rendered as HCL syntax rather than as a quoted string."""

    def render(self, indent: int = 0) -> str:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash((type(self).__name__, repr(self.__dict__)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.render()!r})"


class Raw(Expression):
    """Verbatim HCL expression, e.g. a resource reference."""

    def __init__(self, text: str):
        self.text = text

    def render(self, indent: int = 0) -> str:
        return self.text


class FunctionCall(Expression):
    def __init__(self, name: str, args: tuple):
        self.name = name
        self.args = args

    def render(self, indent: int = 0) -> str:
        rendered = ", ".join(render_value(arg, indent) for arg in self.args)
        return f"{self.name}({rendered})"


class Conditional(Expression):
    def __init__(self, condition: str, when_true: Any, when_false: Any):
        self.condition = condition
        self.when_true = when_true
        self.when_false = when_false

    def render(self, indent: int = 0) -> str:
        return (
            f"{self.condition} ? {render_value(self.when_true, indent)} "
            f": {render_value(self.when_false, indent)}"
        )


class _Separator:
    pass


BLANK_LINE = _Separator()


def ref(expression: str) -> Raw:
    """Reference to a resource, data source, local or any other expression."""
    return Raw(expression)


def var(name: str) -> Raw:
    return Raw(f"var.{name}")


def local(name: str) -> Raw:
    return Raw(f"local.{name}")


def module_output(module: str, name: str) -> Raw:
    return Raw(f"module.{module}.{name}")


def string_template(template: str) -> Raw:
    """Quoted string whose ``${...}`` interpolations are kept live."""
    return Raw('"' + template.replace('"', '\\"') + '"')


def function_call(name: str, *args: Any) -> FunctionCall:
    return FunctionCall(name, args)


def conditional(condition: str, when_true: Any, when_false: Any) -> Conditional:
    return Conditional(condition, when_true, when_false)


def heredoc(text: str, marker: str = "EOT") -> Raw:
    """Indented heredoc (``<<-EOT``). The body is written verbatim."""
    return Raw(f"<<-{marker}\n{text.rstrip(chr(10))}\n{marker}")


def refs(expressions: Iterable[str]) -> list[Raw]:
    """List of references, e.g. for ``depends_on``."""
    return [Raw(e) for e in expressions]


def quote(value: str) -> str:
    """Quote a literal string, escaping anything HCL would interpret."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )
    return f'"{escaped}"'


def _is_simple(value: Any) -> bool:
    return not isinstance(value, (dict, list, tuple)) or (
        isinstance(value, (list, tuple)) and all(not isinstance(v, (dict, list, tuple)) for v in value)
    )


def render_value(value: Any, indent: int = 0) -> str:
    """
    Render a Python value as an HCL expression.

    Args:
        value: str, bool, int, float, None, list, dict or Expression
        indent: Indentation level of the line the value starts on

    Returns:
        HCL text; continuation lines carry absolute indentation
    """
    if isinstance(value, Expression):
        return value.render(indent)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        if _is_simple(value):
            return "[" + ", ".join(render_value(v, indent) for v in value) + "]"
        inner = INDENT * (indent + 1)
        items = [f"{inner}{render_value(v, indent + 1)}," for v in value]
        return "[\n" + "\n".join(items) + "\n" + INDENT * indent + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        inner = INDENT * (indent + 1)
        width = max(len(_object_key(k)) for k in value)
        lines = [
            f"{inner}{_object_key(k).ljust(width)} = {render_value(v, indent + 1)}"
            for k, v in value.items()
        ]
        return "{\n" + "\n".join(lines) + "\n" + INDENT * indent + "}"
    raise TypeError(f"cannot render {type(value).__name__} as HCL")


def _object_key(key: str) -> str:
    key = str(key)
    if key and key.replace("_", "a").replace("-", "a").isalnum() and not key[0].isdigit():
        return key
    return quote(key)


class Body:
    """Ordered attributes, nested blocks and blank lines."""

    def __init__(self):
        self.items: list[Any] = []

    def set(self, name: str, value: Any) -> "Body":
        """Set an attribute; re-setting a name replaces the value in place."""
        for i, item in enumerate(self.items):
            if isinstance(item, tuple) and item[0] == name:
                self.items[i] = (name, value)
                return self
        self.items.append((name, value))
        return self

    def get(self, name: str) -> Any:
        for item in self.items:
            if isinstance(item, tuple) and item[0] == name:
                return item[1]
        raise KeyError(name)

    def newline(self) -> "Body":
        self.items.append(BLANK_LINE)
        return self

    def block(self, block_type: str, *labels: str) -> "Block":
        """Append a nested block and return it for further population."""
        child = Block(block_type, *labels)
        self.items.append(child)
        return child

    def append(self, block: "Block") -> "Body":
        self.items.append(block)
        return self

    @property
    def blocks(self) -> list["Block"]:
        return [item for item in self.items if isinstance(item, Block)]

    def render_items(self, indent: int) -> list[str]:
        lines: list[str] = []
        run: list[tuple[str, Any]] = []

        def flush():
            if not run:
                return
            width = max(len(name) for name, _ in run)
            for name, value in run:
                rendered = render_value(value, indent)
                lines.append(f"{INDENT * indent}{name.ljust(width)} = {rendered}")
            run.clear()

        for item in self.items:
            if isinstance(item, tuple):
                run.append(item)
            elif item is BLANK_LINE:
                flush()
                lines.append("")
            else:
                flush()
                lines.append(item.render(indent))
        flush()

        while lines and lines[-1] == "":
            lines.pop()
        return lines

    def render(self) -> str:
        lines = self.render_items(0)
        return "\n".join(lines) + "\n" if lines else ""


class Block(Body):
    """A labelled HCL block such as ``resource "aws_subnet" "x" { ... }``."""

    def __init__(self, block_type: str, *labels: str):
        super().__init__()
        self.type = block_type
        self.labels = list(labels)

    @property
    def address(self) -> str:
        """Terraform reference address: `type.name` for resources, `data.type.name` for data."""
        if self.type == "resource":
            return ".".join(self.labels)
        return ".".join([self.type, *self.labels])

    def render(self, indent: int = 0) -> str:
        header = " ".join([self.type, *(quote(label) for label in self.labels)])
        prefix = INDENT * indent
        inner = self.render_items(indent + 1)
        if not inner:
            return f"{prefix}{header} {{\n{prefix}}}"
        return f"{prefix}{header} {{\n" + "\n".join(inner) + f"\n{prefix}}}"


def render(blocks: Iterable[Block]) -> str:
    """Render top level blocks separated by blank lines."""
    rendered = [block.render() for block in blocks]
    if not rendered:
        return ""
    return "\n\n".join(rendered) + "\n"


def render_attributes(values: dict[str, Any]) -> str:
    """Render a flat attribute file such as ``inputs.auto.tfvars``."""
    body = Body()
    for name, value in values.items():
        body.set(name, value)
    return body.render()
