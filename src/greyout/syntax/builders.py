"""
Draft builders for C#-like syntax trees.

Drafts describe a tree without positions. Rendering a draft lays out the
source text with a canonical spacing and produces the positioned Node tree at
the same time, so every token in the tree points at real text in the source.
The engine does not need this module; it is the front-end used by tests and
by hosts that synthesize code for analysis.

Plain Python values are accepted wherever an expression is expected:
strings become identifiers and bool/int/float/None become literals. Use
``lit("text")`` for a string literal.

Example:
    tree = build(
        method("Run", [param("int", "x")], block(
            if_(True, block(return_(binary("+", "x", 0)))),
        ))
    )
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, Optional, Sequence, Union

from greyout.syntax.nodes import LEAF_KINDS, Node, NodeKind, SyntaxTree
from greyout.utils.errors import SourceLocation


# -----------------------------------------------------------------------------
# Draft model
# -----------------------------------------------------------------------------


class Layout(Enum):
    """Layout markers understood by the renderer."""

    NEWLINE = auto()
    INDENT = auto()
    DEDENT = auto()


NL = Layout.NEWLINE
INDENT = Layout.INDENT
DEDENT = Layout.DEDENT

INDENT_UNIT = "    "


@dataclass(frozen=True)
class Tok:
    """A token draft."""

    text: str
    role: Optional[str] = None

    def as_(self, role: str) -> Tok:
        return replace(self, role=role)


@dataclass(frozen=True)
class Draft:
    """
    A node draft.

    Attributes:
        kind: Kind of the node to produce
        parts: Child drafts, tokens, trivia strings and layout markers
        role: Role of the produced node inside its parent
        text: Text for leaf kinds
        value: Literal value
    """

    kind: NodeKind
    parts: tuple = ()
    role: Optional[str] = None
    text: Optional[str] = None
    value: Any = None

    def as_(self, role: str) -> Draft:
        return replace(self, role=role)


Part = Union[Draft, Tok, Layout, str]
ExprLike = Union[Draft, str, int, float, bool, None]


class _Renderer:
    """Writes drafts out as text while building positioned nodes."""

    def __init__(self, filename: Optional[str] = None) -> None:
        self._filename = filename
        self._chunks: list[str] = []
        self._line = 1
        self._column = 1
        self._offset = 0
        self._depth = 0

    @property
    def source(self) -> str:
        return "".join(self._chunks)

    def _here(self) -> SourceLocation:
        return SourceLocation(self._line, self._column, self._offset, self._filename)

    def _write(self, text: str) -> None:
        self._chunks.append(text)
        newlines = text.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(text) - text.rfind("\n")
        else:
            self._column += len(text)
        self._offset += len(text)

    def render(self, part: Part) -> Optional[Node]:
        if isinstance(part, str):
            self._write(part)
            return None
        if isinstance(part, Layout):
            if part is Layout.NEWLINE:
                self._write("\n" + INDENT_UNIT * self._depth)
            elif part is Layout.INDENT:
                self._depth += 1
            else:
                self._depth -= 1
            return None
        if isinstance(part, Tok):
            start = self._here()
            self._write(part.text)
            return Node(NodeKind.TOKEN, start, self._here(), role=part.role, text=part.text)
        if part.kind in LEAF_KINDS:
            start = self._here()
            self._write(part.text or "")
            return Node(part.kind, start, self._here(), role=part.role, text=part.text, value=part.value)

        children: list[Node] = []
        for sub in part.parts:
            node = self.render(sub)
            if node is not None:
                children.append(node)
        if children:
            start, end = children[0].location, children[-1].end_location
        else:
            start = end = self._here()
        return Node(part.kind, start, end, tuple(children), part.role, part.text, part.value)


def build(draft: Draft, filename: Optional[str] = None) -> SyntaxTree:
    """
    Render a draft into source text and a linked syntax tree.

    Args:
        draft: Root draft, usually a declaration
        filename: Optional filename recorded in every location

    Returns:
        The assembled SyntaxTree
    """
    renderer = _Renderer(filename)
    root = renderer.render(draft)
    return SyntaxTree(root, renderer.source, filename)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _expr(value: ExprLike) -> Draft:
    if isinstance(value, Draft):
        return value
    if isinstance(value, str):
        return ident(value)
    return lit(value)


def _separated(items: Sequence[Draft], role: str) -> tuple:
    parts: list[Part] = []
    for index, item in enumerate(items):
        if index:
            parts.extend((Tok(",", "separator"), " "))
        parts.append(item.as_(role))
    return tuple(parts)


def _modifiers(modifiers: Sequence[str]) -> tuple:
    parts: list[Part] = []
    for text in modifiers:
        parts.extend((Tok(text, "modifier"), " "))
    return tuple(parts)


def _embedded(statement: Draft) -> tuple:
    if statement.kind is NodeKind.BLOCK:
        return (" ", statement.as_("statement"))
    return (INDENT, NL, statement.as_("statement"), DEDENT)


def _parenthesized(inner: Draft, role: str) -> tuple:
    return (Tok("(", "open_paren"), inner.as_(role), Tok(")", "close_paren"))


# -----------------------------------------------------------------------------
# Leaves
# -----------------------------------------------------------------------------


def ident(name: str) -> Draft:
    return Draft(NodeKind.IDENTIFIER_NAME, text=name)


def lit(value: Any) -> Draft:
    """Create a literal; True/False/None render as true/false/null."""
    if value is True:
        text = "true"
    elif value is False:
        text = "false"
    elif value is None:
        text = "null"
    elif isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        text = f'"{escaped}"'
    else:
        text = repr(value)
    return Draft(NodeKind.LITERAL, text=text, value=value)


def type_(name: str) -> Draft:
    return Draft(NodeKind.TYPE, text=name)


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


BINARY_OPERATORS = {
    "+": NodeKind.ADD_EXPRESSION,
    "-": NodeKind.SUBTRACT_EXPRESSION,
    "*": NodeKind.MULTIPLY_EXPRESSION,
    "/": NodeKind.DIVIDE_EXPRESSION,
    "%": NodeKind.MODULO_EXPRESSION,
    "==": NodeKind.EQUALS_EXPRESSION,
    "!=": NodeKind.NOT_EQUALS_EXPRESSION,
    "<": NodeKind.LESS_THAN_EXPRESSION,
    "<=": NodeKind.LESS_THAN_OR_EQUAL_EXPRESSION,
    ">": NodeKind.GREATER_THAN_EXPRESSION,
    ">=": NodeKind.GREATER_THAN_OR_EQUAL_EXPRESSION,
    "&&": NodeKind.LOGICAL_AND_EXPRESSION,
    "||": NodeKind.LOGICAL_OR_EXPRESSION,
    "??": NodeKind.COALESCE_EXPRESSION,
}

UNARY_OPERATORS = {
    "+": NodeKind.UNARY_PLUS_EXPRESSION,
    "-": NodeKind.UNARY_MINUS_EXPRESSION,
    "!": NodeKind.LOGICAL_NOT_EXPRESSION,
}

ASSIGNMENT_OPERATORS = {
    "=": NodeKind.SIMPLE_ASSIGNMENT,
    "+=": NodeKind.ADD_ASSIGNMENT,
    "-=": NodeKind.SUBTRACT_ASSIGNMENT,
    "*=": NodeKind.MULTIPLY_ASSIGNMENT,
    "/=": NodeKind.DIVIDE_ASSIGNMENT,
}


def binary(op: str, left: ExprLike, right: ExprLike) -> Draft:
    return Draft(
        BINARY_OPERATORS[op],
        (_expr(left).as_("left"), " ", Tok(op, "operator"), " ", _expr(right).as_("right")),
    )


def unary(op: str, operand: ExprLike) -> Draft:
    return Draft(UNARY_OPERATORS[op], (Tok(op, "operator"), _expr(operand).as_("operand")))


def assign(op: str, target: ExprLike, value: ExprLike) -> Draft:
    return Draft(
        ASSIGNMENT_OPERATORS[op],
        (_expr(target).as_("left"), " ", Tok(op, "operator"), " ", _expr(value).as_("right")),
    )


def paren(inner: ExprLike) -> Draft:
    return Draft(NodeKind.PARENTHESIZED_EXPRESSION, _parenthesized(_expr(inner), "expression"))


def ternary(condition: ExprLike, when_true: ExprLike, when_false: ExprLike) -> Draft:
    return Draft(
        NodeKind.CONDITIONAL_EXPRESSION,
        (
            _expr(condition).as_("condition"),
            " ",
            Tok("?", "question"),
            " ",
            _expr(when_true).as_("when_true"),
            " ",
            Tok(":", "colon"),
            " ",
            _expr(when_false).as_("when_false"),
        ),
    )


def member(target: ExprLike, name: str) -> Draft:
    return Draft(
        NodeKind.MEMBER_ACCESS,
        (_expr(target).as_("expression"), Tok(".", "operator"), ident(name).as_("name")),
    )


def arguments(*args: ExprLike) -> Draft:
    return Draft(
        NodeKind.ARGUMENT_LIST,
        (
            Tok("(", "open_paren"),
            *_separated([_expr(arg) for arg in args], "argument"),
            Tok(")", "close_paren"),
        ),
    )


def call(callee: ExprLike, *args: ExprLike) -> Draft:
    return Draft(
        NodeKind.INVOCATION_EXPRESSION,
        (_expr(callee).as_("expression"), arguments(*args).as_("argument_list")),
    )


def invoke(target: ExprLike, method_name: str, *args: ExprLike) -> Draft:
    """Call a method on a receiver: ``target.method_name(args)``."""
    return call(member(target, method_name), *args)


def lambda_(params: Union[str, Sequence[str]], body: ExprLike) -> Draft:
    """
    Create a lambda expression.

    A single string gives ``x => body``; a sequence gives ``(a, b) => body``.
    """
    if isinstance(params, str):
        head: tuple = (Draft(NodeKind.PARAMETER, (Tok(params, "identifier"),)).as_("parameter"),)
    else:
        items = [Draft(NodeKind.PARAMETER, (Tok(name, "identifier"),)) for name in params]
        head = (
            Draft(
                NodeKind.PARAMETER_LIST,
                (Tok("(", "open_paren"), *_separated(items, "parameter"), Tok(")", "close_paren")),
            ).as_("parameter_list"),
        )
    return Draft(NodeKind.LAMBDA_EXPRESSION, (*head, " ", Tok("=>", "arrow"), " ", _expr(body).as_("body")))


def await_(operand: ExprLike) -> Draft:
    return Draft(NodeKind.AWAIT_EXPRESSION, (Tok("await", "await_keyword"), " ", _expr(operand).as_("expression")))


def anonymous(*members: Union[tuple[str, ExprLike], ExprLike]) -> Draft:
    """
    Create an anonymous object: ``new { A = a, b.C }``.

    Members are either ``(name, expression)`` pairs or bare expressions.
    """
    declarators = []
    for entry in members:
        if isinstance(entry, tuple):
            name, value = entry
            parts: tuple = (Tok(name, "name"), " ", Tok("=", "equals"), " ", _expr(value).as_("expression"))
        else:
            parts = (_expr(entry).as_("expression"),)
        declarators.append(Draft(NodeKind.ANONYMOUS_MEMBER_DECLARATOR, parts))
    return Draft(
        NodeKind.ANONYMOUS_OBJECT_CREATION,
        (
            Tok("new", "new_keyword"),
            " ",
            Tok("{", "open_brace"),
            " ",
            *_separated(declarators, "initializer"),
            " ",
            Tok("}", "close_brace"),
        ),
    )


def where(condition: ExprLike) -> Draft:
    return Draft(NodeKind.WHERE_CLAUSE, (Tok("where", "where_keyword"), " ", _expr(condition).as_("condition")))


def query(variable: str, source: ExprLike, *clauses: Draft, select: ExprLike) -> Draft:
    """Create ``from variable in source <clauses> select expr``."""
    from_clause = Draft(
        NodeKind.FROM_CLAUSE,
        (
            Tok("from", "from_keyword"),
            " ",
            Tok(variable, "identifier"),
            " ",
            Tok("in", "in_keyword"),
            " ",
            _expr(source).as_("expression"),
        ),
    )
    select_clause = Draft(
        NodeKind.SELECT_CLAUSE,
        (Tok("select", "select_keyword"), " ", _expr(select).as_("expression")),
    )
    parts: list[Part] = [from_clause.as_("from")]
    for clause in clauses:
        parts.extend((" ", clause.as_("clause")))
    parts.extend((" ", select_clause.as_("select")))
    return Draft(NodeKind.QUERY_EXPRESSION, tuple(parts))


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


def block(*statements: Draft) -> Draft:
    if not statements:
        return Draft(NodeKind.BLOCK, (Tok("{", "open_brace"), " ", Tok("}", "close_brace")))
    parts: list[Part] = [Tok("{", "open_brace"), INDENT]
    for statement in statements:
        parts.extend((NL, statement.as_("statement")))
    parts.extend((DEDENT, NL, Tok("}", "close_brace")))
    return Draft(NodeKind.BLOCK, tuple(parts))


def inline_block(*statements: Draft) -> Draft:
    """A block laid out on one line: ``{ a; b; }``."""
    parts: list[Part] = [Tok("{", "open_brace")]
    for statement in statements:
        parts.extend((" ", statement.as_("statement")))
    parts.extend((" ", Tok("}", "close_brace")))
    return Draft(NodeKind.BLOCK, tuple(parts))


def expr_stmt(expression: ExprLike) -> Draft:
    return Draft(NodeKind.EXPRESSION_STATEMENT, (_expr(expression).as_("expression"), Tok(";", "semicolon")))


def var_decl(type_name: str, name: str, value: ExprLike = None) -> Draft:
    """Create ``type name = value`` without a terminator; pass ``lit(None)`` for ``= null``."""
    parts: list[Part] = [Tok(name, "identifier")]
    if value is not None:
        parts.extend((" ", Tok("=", "equals"), " ", _expr(value).as_("initializer")))
    declarator = Draft(NodeKind.VARIABLE_DECLARATOR, tuple(parts))
    return Draft(NodeKind.VARIABLE_DECLARATION, (type_(type_name).as_("type"), " ", declarator.as_("variable")))


def local(type_name: str, name: str, value: ExprLike = None, *, const: bool = False) -> Draft:
    modifiers = _modifiers(("const",)) if const else ()
    return Draft(
        NodeKind.LOCAL_DECLARATION,
        (*modifiers, var_decl(type_name, name, value).as_("declaration"), Tok(";", "semicolon")),
    )


def return_(value: ExprLike = None) -> Draft:
    """Create a return statement; a None value gives a bare ``return;``."""
    if value is None:
        return Draft(NodeKind.RETURN_STATEMENT, (Tok("return", "return_keyword"), Tok(";", "semicolon")))
    return Draft(
        NodeKind.RETURN_STATEMENT,
        (Tok("return", "return_keyword"), " ", _expr(value).as_("expression"), Tok(";", "semicolon")),
    )


def throw_(value: ExprLike = None) -> Draft:
    if value is None:
        return Draft(NodeKind.THROW_STATEMENT, (Tok("throw", "throw_keyword"), Tok(";", "semicolon")))
    return Draft(
        NodeKind.THROW_STATEMENT,
        (Tok("throw", "throw_keyword"), " ", _expr(value).as_("expression"), Tok(";", "semicolon")),
    )


def yield_return(value: ExprLike) -> Draft:
    return Draft(
        NodeKind.YIELD_RETURN_STATEMENT,
        (
            Tok("yield", "yield_keyword"),
            " ",
            Tok("return", "return_keyword"),
            " ",
            _expr(value).as_("expression"),
            Tok(";", "semicolon"),
        ),
    )


def break_() -> Draft:
    return Draft(NodeKind.BREAK_STATEMENT, (Tok("break", "break_keyword"), Tok(";", "semicolon")))


def continue_() -> Draft:
    return Draft(NodeKind.CONTINUE_STATEMENT, (Tok("continue", "continue_keyword"), Tok(";", "semicolon")))


def empty() -> Draft:
    return Draft(NodeKind.EMPTY_STATEMENT, (Tok(";", "semicolon"),))


def labeled(label: str, statement: Draft) -> Draft:
    return Draft(
        NodeKind.LABELED_STATEMENT,
        (Tok(label, "identifier"), Tok(":", "colon"), " ", statement.as_("statement")),
    )


def if_(condition: ExprLike, then: Draft, else_: Optional[Draft] = None) -> Draft:
    parts: list[Part] = [
        Tok("if", "if_keyword"),
        " ",
        *_parenthesized(_expr(condition), "condition"),
        *_embedded(then),
    ]
    if else_ is not None:
        if else_.kind in (NodeKind.BLOCK, NodeKind.IF_STATEMENT):
            body: tuple = (" ", else_.as_("statement"))
        else:
            body = _embedded(else_)
        clause = Draft(NodeKind.ELSE_CLAUSE, (Tok("else", "else_keyword"), *body))
        parts.extend((" " if then.kind is NodeKind.BLOCK else NL, clause.as_("else")))
    return Draft(NodeKind.IF_STATEMENT, tuple(parts))


def while_(condition: ExprLike, body: Draft) -> Draft:
    return Draft(
        NodeKind.WHILE_STATEMENT,
        (Tok("while", "while_keyword"), " ", *_parenthesized(_expr(condition), "condition"), *_embedded(body)),
    )


def for_(
    initializer: Union[Draft, Sequence[ExprLike], None],
    condition: ExprLike,
    incrementors: Sequence[ExprLike],
    body: Draft,
) -> Draft:
    """
    Create a for loop.

    Args:
        initializer: A ``var_decl`` draft, a sequence of expressions, or None
        condition: Loop condition, or None for an unconditional loop
        incrementors: Expressions evaluated after each iteration
        body: Loop body
    """
    parts: list[Part] = [Tok("for", "for_keyword"), " ", Tok("(", "open_paren")]
    if isinstance(initializer, Draft):
        parts.append(initializer.as_("declaration"))
    elif initializer:
        parts.extend(_separated([_expr(item) for item in initializer], "initializer"))
    parts.append(Tok(";", "first_semicolon"))
    if condition is not None:
        parts.extend((" ", _expr(condition).as_("condition")))
    parts.append(Tok(";", "second_semicolon"))
    if incrementors:
        parts.extend((" ", *_separated([_expr(item) for item in incrementors], "incrementor")))
    parts.extend((Tok(")", "close_paren"), *_embedded(body)))
    return Draft(NodeKind.FOR_STATEMENT, tuple(parts))


def foreach_(type_name: str, name: str, source: ExprLike, body: Draft) -> Draft:
    return Draft(
        NodeKind.FOREACH_STATEMENT,
        (
            Tok("foreach", "foreach_keyword"),
            " ",
            Tok("(", "open_paren"),
            type_(type_name).as_("type"),
            " ",
            Tok(name, "identifier"),
            " ",
            Tok("in", "in_keyword"),
            " ",
            _expr(source).as_("expression"),
            Tok(")", "close_paren"),
            *_embedded(body),
        ),
    )


def _guarded(kind: NodeKind, keyword: str, head: ExprLike, body: Draft) -> Draft:
    head_draft = _expr(head)
    role = "declaration" if head_draft.kind is NodeKind.VARIABLE_DECLARATION else "expression"
    return Draft(
        kind,
        (Tok(keyword, f"{keyword}_keyword"), " ", *_parenthesized(head_draft, role), *_embedded(body)),
    )


def using_(resource: ExprLike, body: Draft) -> Draft:
    return _guarded(NodeKind.USING_STATEMENT, "using", resource, body)


def lock_(target: ExprLike, body: Draft) -> Draft:
    return _guarded(NodeKind.LOCK_STATEMENT, "lock", target, body)


def fixed_(declaration: Draft, body: Draft) -> Draft:
    return _guarded(NodeKind.FIXED_STATEMENT, "fixed", declaration, body)


def case_(value: ExprLike) -> Draft:
    return Draft(
        NodeKind.CASE_LABEL,
        (Tok("case", "case_keyword"), " ", _expr(value).as_("value"), Tok(":", "colon")),
    )


def default_() -> Draft:
    return Draft(NodeKind.DEFAULT_LABEL, (Tok("default", "default_keyword"), Tok(":", "colon")))


def section(labels: Sequence[Draft], *statements: Draft) -> Draft:
    parts: list[Part] = []
    for index, label in enumerate(labels):
        if index:
            parts.append(" ")
        parts.append(label.as_("label"))
    parts.append(INDENT)
    for statement in statements:
        parts.extend((NL, statement.as_("statement")))
    parts.append(DEDENT)
    return Draft(NodeKind.SWITCH_SECTION, tuple(parts))


def switch_(governing: ExprLike, *sections: Draft) -> Draft:
    parts: list[Part] = [
        Tok("switch", "switch_keyword"),
        " ",
        *_parenthesized(_expr(governing), "expression"),
        " ",
        Tok("{", "open_brace"),
        INDENT,
    ]
    for item in sections:
        parts.extend((NL, item.as_("section")))
    parts.extend((DEDENT, NL, Tok("}", "close_brace")))
    return Draft(NodeKind.SWITCH_STATEMENT, tuple(parts))


def catch_(
    body: Draft,
    type_name: Optional[str] = None,
    name: Optional[str] = None,
    when: ExprLike = None,
) -> Draft:
    """Create ``catch (Type name) when (filter) { ... }``; every part but the body is optional."""
    parts: list[Part] = [Tok("catch", "catch_keyword")]
    if type_name is not None:
        inner: list[Part] = [Tok("(", "open_paren"), type_(type_name).as_("type")]
        if name is not None:
            inner.extend((" ", Tok(name, "identifier")))
        inner.append(Tok(")", "close_paren"))
        parts.extend((" ", Draft(NodeKind.CATCH_DECLARATION, tuple(inner)).as_("declaration")))
    if when is not None:
        condition = _expr(when)
        clause = Draft(
            NodeKind.CATCH_FILTER,
            (Tok("when", "when_keyword"), " ", *_parenthesized(condition, "expression")),
        )
        parts.extend((" ", clause.as_("filter")))
    parts.extend((" ", body.as_("block")))
    return Draft(NodeKind.CATCH_CLAUSE, tuple(parts))


def try_(body: Draft, *catches: Draft, finally_: Optional[Draft] = None) -> Draft:
    parts: list[Part] = [Tok("try", "try_keyword"), " ", body.as_("block")]
    for clause in catches:
        parts.extend((" ", clause.as_("catch")))
    if finally_ is not None:
        clause = Draft(NodeKind.FINALLY_CLAUSE, (Tok("finally", "finally_keyword"), " ", finally_.as_("block")))
        parts.extend((" ", clause.as_("finally")))
    return Draft(NodeKind.TRY_STATEMENT, tuple(parts))


# -----------------------------------------------------------------------------
# Declarations
# -----------------------------------------------------------------------------


def param(type_name: str, name: str, *modifiers: str) -> Draft:
    return Draft(
        NodeKind.PARAMETER,
        (*_modifiers(modifiers), type_(type_name).as_("type"), " ", Tok(name, "identifier")),
    )


def parameters(params: Sequence[Draft]) -> Draft:
    return Draft(
        NodeKind.PARAMETER_LIST,
        (Tok("(", "open_paren"), *_separated(params, "parameter"), Tok(")", "close_paren")),
    )


def method(
    name: str,
    params: Sequence[Draft] = (),
    body: Optional[Draft] = None,
    modifiers: Sequence[str] = ("public",),
    returns: str = "void",
) -> Draft:
    """Create a method; without a body it ends in ``;``."""
    tail: tuple = (" ", body.as_("body")) if body is not None else (Tok(";", "semicolon"),)
    return Draft(
        NodeKind.METHOD_DECLARATION,
        (
            *_modifiers(modifiers),
            type_(returns).as_("return_type"),
            " ",
            Tok(name, "identifier"),
            parameters(params).as_("parameter_list"),
            *tail,
        ),
    )


def base_call(*args: ExprLike, keyword: str = "base") -> Draft:
    return Draft(
        NodeKind.CONSTRUCTOR_INITIALIZER,
        (Tok(":", "colon"), " ", Tok(keyword, "keyword"), arguments(*args).as_("argument_list")),
    )


def constructor(
    name: str,
    params: Sequence[Draft] = (),
    body: Optional[Draft] = None,
    modifiers: Sequence[str] = ("public",),
    initializer: Optional[Draft] = None,
) -> Draft:
    parts: list[Part] = [*_modifiers(modifiers), Tok(name, "identifier"), parameters(params).as_("parameter_list")]
    if initializer is not None:
        parts.extend((" ", initializer.as_("initializer")))
    parts.extend((" ", (body if body is not None else block()).as_("body")))
    return Draft(NodeKind.CONSTRUCTOR_DECLARATION, tuple(parts))


def class_(
    name: str,
    *members: Draft,
    modifiers: Sequence[str] = ("public",),
    bases: Sequence[str] = (),
) -> Draft:
    parts: list[Part] = [*_modifiers(modifiers), Tok("class", "class_keyword"), " ", Tok(name, "identifier")]
    if bases:
        base_list = Draft(
            NodeKind.BASE_LIST,
            (Tok(":", "colon"), " ", *_separated([type_(base) for base in bases], "type")),
        )
        parts.extend((" ", base_list.as_("base_list")))
    parts.extend((" ", Tok("{", "open_brace"), INDENT))
    for item in members:
        parts.extend((NL, item.as_("member")))
    parts.extend((DEDENT, NL, Tok("}", "close_brace")))
    return Draft(NodeKind.CLASS_DECLARATION, tuple(parts))


def compilation_unit(*members: Draft) -> Draft:
    parts: list[Part] = []
    for index, item in enumerate(members):
        if index:
            parts.append(NL)
        parts.append(item.as_("member"))
    return Draft(NodeKind.COMPILATION_UNIT, tuple(parts))
