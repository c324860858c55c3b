"""
Tree-local semantic oracle.

SyntacticFacts answers the SemanticFacts queries using nothing but the tree
it was built for. It is deliberately conservative: anything it cannot derive
from the declarations in scope raises FactUnavailable, which the facts
handle turns into an absent answer.

Features:
- Folds literal, unary, binary and conditional expressions, and identifiers
  bound to ``const`` locals
- Resolves declared types of parameters, locals, catch and foreach variables
- Recognizes well-known framework types under their keyword, short and
  fully-qualified names
- Resolves identifier reads to their declaring binding by walking scopes
- Compares subtrees token for token

Usage:
    oracle = SyntacticFacts(tree)
    oracle.constant_value(node)      # Constant(0) or raises FactUnavailable
    oracle.static_type(node)         # TypeId("System.Int32", INTEGRAL)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from greyout.semantics.facts import Constant, SpecialType, SymbolId, TypeId
from greyout.syntax.nodes import Node, NodeKind, SyntaxTree, preorder
from greyout.utils.errors import FactUnavailable


# -----------------------------------------------------------------------------
# Well-known types
# -----------------------------------------------------------------------------

# (canonical name, keyword alias, special type)
_WELL_KNOWN_TYPES = (
    ("System.Boolean", "bool", SpecialType.BOOLEAN),
    ("System.Byte", "byte", SpecialType.INTEGRAL),
    ("System.SByte", "sbyte", SpecialType.INTEGRAL),
    ("System.Int16", "short", SpecialType.INTEGRAL),
    ("System.UInt16", "ushort", SpecialType.INTEGRAL),
    ("System.Int32", "int", SpecialType.INTEGRAL),
    ("System.UInt32", "uint", SpecialType.INTEGRAL),
    ("System.Int64", "long", SpecialType.INTEGRAL),
    ("System.UInt64", "ulong", SpecialType.INTEGRAL),
    ("System.Single", "float", SpecialType.FLOATING),
    ("System.Double", "double", SpecialType.FLOATING),
    ("System.Decimal", "decimal", SpecialType.DECIMAL),
    ("System.Char", "char", SpecialType.NONE),
    ("System.String", "string", SpecialType.STRING),
    ("System.Object", "object", SpecialType.OBJECT),
    ("System.Exception", None, SpecialType.EXCEPTION),
    ("System.Threading.Tasks.Task", None, SpecialType.NONE),
)

TYPE_ALIASES: dict[str, str] = {}
SPECIAL_TYPES: dict[str, SpecialType] = {}
for _canonical, _keyword, _special in _WELL_KNOWN_TYPES:
    SPECIAL_TYPES[_canonical] = _special
    TYPE_ALIASES[_canonical] = _canonical
    TYPE_ALIASES[_canonical.rsplit(".", 1)[-1]] = _canonical
    if _keyword:
        TYPE_ALIASES[_keyword] = _canonical


def type_named(name: str) -> TypeId:
    """Resolve a written type name to its canonical TypeId."""
    canonical = TYPE_ALIASES.get(name, name)
    return TypeId(canonical, SPECIAL_TYPES.get(canonical, SpecialType.NONE))


BOOLEAN = type_named("bool")
INT32 = type_named("int")
DOUBLE = type_named("double")
STRING = type_named("string")


_ARITHMETIC_KINDS = frozenset({
    NodeKind.ADD_EXPRESSION,
    NodeKind.SUBTRACT_EXPRESSION,
    NodeKind.MULTIPLY_EXPRESSION,
    NodeKind.DIVIDE_EXPRESSION,
    NodeKind.MODULO_EXPRESSION,
})

_BOOLEAN_RESULT_KINDS = frozenset({
    NodeKind.EQUALS_EXPRESSION,
    NodeKind.NOT_EQUALS_EXPRESSION,
    NodeKind.LESS_THAN_EXPRESSION,
    NodeKind.LESS_THAN_OR_EQUAL_EXPRESSION,
    NodeKind.GREATER_THAN_EXPRESSION,
    NodeKind.GREATER_THAN_OR_EQUAL_EXPRESSION,
    NodeKind.LOGICAL_AND_EXPRESSION,
    NodeKind.LOGICAL_OR_EXPRESSION,
    NodeKind.LOGICAL_NOT_EXPRESSION,
})

_COMPOUND_ASSIGNMENT_KINDS = frozenset({
    NodeKind.ADD_ASSIGNMENT,
    NodeKind.SUBTRACT_ASSIGNMENT,
    NodeKind.MULTIPLY_ASSIGNMENT,
    NodeKind.DIVIDE_ASSIGNMENT,
})


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _truncating_mod(left: int, right: int) -> int:
    remainder = abs(left) % abs(right)
    return remainder if left >= 0 else -remainder


# -----------------------------------------------------------------------------
# Bindings
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Binding:
    """
    A resolved declaration.

    Attributes:
        symbol: Identity of the declared name
        site: The declaring node (parameter, declarator, catch declaration, ...)
        type_node: The written type, if the declaration has one
    """

    symbol: SymbolId
    site: Node
    type_node: Optional[Node] = None


def _symbol(identifier: Node) -> SymbolId:
    return SymbolId(identifier.text or "", identifier.start)


def _parameter_binding(parameter: Node) -> Optional[Binding]:
    identifier = parameter.child("identifier")
    if identifier is None:
        return None
    return Binding(_symbol(identifier), parameter, parameter.child("type"))


def _declaration_bindings(declaration: Optional[Node]) -> list[Binding]:
    if declaration is None or declaration.kind is not NodeKind.VARIABLE_DECLARATION:
        return []
    type_node = declaration.child("type")
    bindings = []
    for declarator in declaration.children_with("variable"):
        identifier = declarator.child("identifier")
        if identifier is not None:
            bindings.append(Binding(_symbol(identifier), declarator, type_node))
    return bindings


def _parameters_of(node: Node) -> list[Node]:
    single = node.child("parameter")
    if single is not None:
        return [single]
    parameter_list = node.child("parameter_list")
    if parameter_list is None:
        return []
    return list(parameter_list.children_with("parameter"))


def _scope_bindings(scope: Node) -> list[Binding]:
    """Bindings a scope node makes visible to its descendants."""
    kind = scope.kind
    if kind is NodeKind.BLOCK:
        bindings = []
        for statement in scope.children_with("statement"):
            if statement.kind is NodeKind.LOCAL_DECLARATION:
                bindings.extend(_declaration_bindings(statement.child("declaration")))
        return bindings
    if kind is NodeKind.SWITCH_STATEMENT:
        bindings = []
        for section in scope.children_with("section"):
            for statement in section.children_with("statement"):
                if statement.kind is NodeKind.LOCAL_DECLARATION:
                    bindings.extend(_declaration_bindings(statement.child("declaration")))
        return bindings
    if kind in (NodeKind.FOR_STATEMENT, NodeKind.USING_STATEMENT, NodeKind.FIXED_STATEMENT):
        return _declaration_bindings(scope.child("declaration"))
    if kind is NodeKind.FOREACH_STATEMENT:
        identifier = scope.child("identifier")
        return [Binding(_symbol(identifier), scope, scope.child("type"))] if identifier else []
    if kind is NodeKind.CATCH_CLAUSE:
        declaration = scope.child("declaration")
        identifier = declaration.child("identifier") if declaration is not None else None
        return [Binding(_symbol(identifier), declaration, declaration.child("type"))] if identifier else []
    if kind is NodeKind.QUERY_EXPRESSION:
        from_clause = scope.child("from")
        identifier = from_clause.child("identifier") if from_clause is not None else None
        return [Binding(_symbol(identifier), from_clause)] if identifier else []
    if kind in (NodeKind.LAMBDA_EXPRESSION, NodeKind.METHOD_DECLARATION, NodeKind.CONSTRUCTOR_DECLARATION):
        return [b for b in (_parameter_binding(p) for p in _parameters_of(scope)) if b is not None]
    return []


# -----------------------------------------------------------------------------
# Oracle
# -----------------------------------------------------------------------------


class SyntacticFacts:
    """
    A SemanticFacts implementation that reads only the given tree.

    Example:
        oracle = SyntacticFacts(tree)
        engine.run(tree, oracle)
    """

    def __init__(self, tree: SyntaxTree) -> None:
        self.tree = tree
        self._folding: set[int] = set()  # const locals being folded, for cycle detection

    # -------------------------------------------------------------------------
    # Bindings
    # -------------------------------------------------------------------------

    def resolve(self, identifier: Node) -> Optional[Binding]:
        """
        Find the declaration an identifier refers to.

        Scopes are searched from the innermost outwards and the search stops at
        the enclosing class, since members are not modeled.

        Returns:
            The binding, or None if the name is not declared in scope
        """
        name = identifier.text
        for scope in identifier.ancestors():
            if scope.kind is NodeKind.CLASS_DECLARATION:
                return None
            for binding in _scope_bindings(scope):
                if binding.symbol.name == name:
                    return binding
        return None

    # -------------------------------------------------------------------------
    # Constant values
    # -------------------------------------------------------------------------

    def constant_value(self, expr: Node) -> Optional[Constant]:
        return Constant(self._fold(expr))

    def _fold(self, expr: Node) -> Any:
        kind = expr.kind

        if kind is NodeKind.LITERAL:
            return expr.value

        if kind is NodeKind.PARENTHESIZED_EXPRESSION:
            return self._fold(expr.child("expression"))

        if kind is NodeKind.IDENTIFIER_NAME:
            return self._fold_identifier(expr)

        if kind in (NodeKind.UNARY_PLUS_EXPRESSION, NodeKind.UNARY_MINUS_EXPRESSION):
            operand = self._fold(expr.child("operand"))
            if not _is_number(operand):
                raise FactUnavailable("unary arithmetic on a non-number", expr.location)
            return -operand if kind is NodeKind.UNARY_MINUS_EXPRESSION else +operand

        if kind is NodeKind.LOGICAL_NOT_EXPRESSION:
            operand = self._fold(expr.child("operand"))
            if not isinstance(operand, bool):
                raise FactUnavailable("logical not on a non-boolean", expr.location)
            return not operand

        if kind is NodeKind.CONDITIONAL_EXPRESSION:
            condition = self._fold(expr.child("condition"))
            if not isinstance(condition, bool):
                raise FactUnavailable("non-boolean condition", expr.location)
            return self._fold(expr.child("when_true" if condition else "when_false"))

        if kind is NodeKind.COALESCE_EXPRESSION:
            left = self._fold(expr.child("left"))
            return self._fold(expr.child("right")) if left is None else left

        if kind in (NodeKind.LOGICAL_AND_EXPRESSION, NodeKind.LOGICAL_OR_EXPRESSION):
            return self._fold_logical(expr)

        if kind in _ARITHMETIC_KINDS or kind in _BOOLEAN_RESULT_KINDS:
            return self._fold_binary(expr)

        raise FactUnavailable(f"{kind.name} is not a compile-time constant", expr.location)

    def _fold_identifier(self, expr: Node) -> Any:
        binding = self.resolve(expr)
        if binding is None or binding.site.kind is not NodeKind.VARIABLE_DECLARATOR:
            raise FactUnavailable(f"'{expr.text}' is not a constant", expr.location)
        statement = binding.site.parent.parent if binding.site.parent is not None else None
        if statement is None or statement.kind is not NodeKind.LOCAL_DECLARATION or not statement.has_modifier("const"):
            raise FactUnavailable(f"'{expr.text}' is not a constant", expr.location)
        initializer = binding.site.child("initializer")
        if initializer is None or id(binding.site) in self._folding:
            raise FactUnavailable(f"'{expr.text}' has no foldable initializer", expr.location)
        self._folding.add(id(binding.site))
        try:
            return self._fold(initializer)
        finally:
            self._folding.discard(id(binding.site))

    def _fold_logical(self, expr: Node) -> bool:
        # Both operands must fold, even where evaluation would short-circuit
        left = self._fold(expr.child("left"))
        right = self._fold(expr.child("right"))
        if not (isinstance(left, bool) and isinstance(right, bool)):
            raise FactUnavailable("logical operator on a non-boolean", expr.location)
        if expr.kind is NodeKind.LOGICAL_AND_EXPRESSION:
            return left and right
        return left or right

    def _fold_binary(self, expr: Node) -> Any:
        left = self._fold(expr.child("left"))
        right = self._fold(expr.child("right"))
        kind = expr.kind

        # Equality works on any pair of like-typed constants, null included
        if kind in (NodeKind.EQUALS_EXPRESSION, NodeKind.NOT_EQUALS_EXPRESSION):
            comparable = (
                left is None
                or right is None
                or (isinstance(left, bool) and isinstance(right, bool))
                or (_is_number(left) and _is_number(right))
                or (isinstance(left, str) and isinstance(right, str))
            )
            if not comparable:
                raise FactUnavailable("equality between unrelated constants", expr.location)
            return (left == right) if kind is NodeKind.EQUALS_EXPRESSION else (left != right)

        if kind is NodeKind.ADD_EXPRESSION and isinstance(left, str) and isinstance(right, str):
            return left + right

        if not (_is_number(left) and _is_number(right)):
            raise FactUnavailable("arithmetic on non-numeric constants", expr.location)

        if kind is NodeKind.LESS_THAN_EXPRESSION:
            return left < right
        if kind is NodeKind.LESS_THAN_OR_EQUAL_EXPRESSION:
            return left <= right
        if kind is NodeKind.GREATER_THAN_EXPRESSION:
            return left > right
        if kind is NodeKind.GREATER_THAN_OR_EQUAL_EXPRESSION:
            return left >= right

        if kind is NodeKind.ADD_EXPRESSION:
            return left + right
        if kind is NodeKind.SUBTRACT_EXPRESSION:
            return left - right
        if kind is NodeKind.MULTIPLY_EXPRESSION:
            return left * right

        integral = isinstance(left, int) and isinstance(right, int)
        if right == 0 and integral:
            raise FactUnavailable("division by zero", expr.location)
        if kind is NodeKind.DIVIDE_EXPRESSION:
            if integral:
                return _truncating_div(left, right)
            if right == 0:
                raise FactUnavailable("floating division by zero", expr.location)
            return left / right
        if kind is NodeKind.MODULO_EXPRESSION and integral:
            return _truncating_mod(left, right)

        raise FactUnavailable(f"{kind.name} cannot be folded", expr.location)

    # -------------------------------------------------------------------------
    # Static types
    # -------------------------------------------------------------------------

    def static_type(self, expr: Node) -> Optional[TypeId]:
        kind = expr.kind

        if kind is NodeKind.LITERAL:
            return self._literal_type(expr)

        if kind is NodeKind.TYPE:
            return type_named(expr.text or "")

        if kind is NodeKind.IDENTIFIER_NAME:
            binding = self.resolve(expr)
            if binding is not None:
                return self._binding_type(binding)
            if expr.text in TYPE_ALIASES:
                return type_named(expr.text)
            raise FactUnavailable(f"cannot resolve '{expr.text}'", expr.location)

        if kind is NodeKind.PARENTHESIZED_EXPRESSION:
            return self.static_type(expr.child("expression"))

        if kind in _BOOLEAN_RESULT_KINDS:
            return BOOLEAN

        if kind in _ARITHMETIC_KINDS:
            return self._arithmetic_type(expr)

        if kind in (NodeKind.UNARY_PLUS_EXPRESSION, NodeKind.UNARY_MINUS_EXPRESSION):
            operand = self.static_type(expr.child("operand"))
            if operand is not None and operand.is_numeric:
                return operand
            raise FactUnavailable("unary arithmetic on a non-number", expr.location)

        if kind in (NodeKind.CONDITIONAL_EXPRESSION, NodeKind.COALESCE_EXPRESSION):
            first, second = ("when_true", "when_false") if kind is NodeKind.CONDITIONAL_EXPRESSION else ("left", "right")
            left = self._type_or_none(expr.child(first))
            right = self._type_or_none(expr.child(second))
            if left is not None and left == right:
                return left
            raise FactUnavailable("branches disagree on type", expr.location)

        if kind is NodeKind.SIMPLE_ASSIGNMENT or kind in _COMPOUND_ASSIGNMENT_KINDS:
            return self.static_type(expr.child("left"))

        if kind is NodeKind.INVOCATION_EXPRESSION:
            callee = expr.child("expression")
            arguments = expr.child("argument_list")
            if (
                callee is not None
                and callee.kind is NodeKind.MEMBER_ACCESS
                and callee.child("name").text == "ToString"
                and arguments is not None
                and not arguments.children_with("argument")
            ):
                return STRING

        raise FactUnavailable(f"no type for {kind.name}", expr.location)

    def _type_or_none(self, expr: Optional[Node]) -> Optional[TypeId]:
        if expr is None:
            return None
        try:
            return self.static_type(expr)
        except FactUnavailable:
            return None

    def _literal_type(self, expr: Node) -> TypeId:
        value = expr.value
        if isinstance(value, bool):
            return BOOLEAN
        if isinstance(value, int):
            return INT32
        if isinstance(value, float):
            return DOUBLE
        if isinstance(value, str):
            return STRING
        raise FactUnavailable("null has no type of its own", expr.location)

    def _binding_type(self, binding: Binding) -> TypeId:
        type_node = binding.type_node
        if type_node is None:
            raise FactUnavailable(f"'{binding.symbol.name}' is implicitly typed", binding.site.location)
        if type_node.text == "var":
            initializer = binding.site.child("initializer")
            if initializer is None:
                raise FactUnavailable(f"'{binding.symbol.name}' is implicitly typed", binding.site.location)
            return self.static_type(initializer)
        return type_named(type_node.text or "")

    def _arithmetic_type(self, expr: Node) -> TypeId:
        left = self.static_type(expr.child("left"))
        right = self.static_type(expr.child("right"))
        if expr.kind is NodeKind.ADD_EXPRESSION and SpecialType.STRING in (left.special, right.special):
            return STRING
        if not (left.is_numeric and right.is_numeric):
            raise FactUnavailable("arithmetic on non-numeric operands", expr.location)
        if SpecialType.DECIMAL in (left.special, right.special):
            return type_named("decimal")
        if left.is_floating or right.is_floating:
            if left.name == right.name == "System.Single":
                return left
            return DOUBLE
        for wide in ("System.UInt64", "System.Int64"):
            if wide in (left.name, right.name):
                return type_named(wide)
        return INT32

    # -------------------------------------------------------------------------
    # Symbols and reads
    # -------------------------------------------------------------------------

    def declared_symbol(self, binding_site: Node) -> Optional[SymbolId]:
        kind = binding_site.kind
        if kind is NodeKind.CATCH_CLAUSE:
            binding_site = binding_site.child("declaration")
            if binding_site is None:
                raise FactUnavailable("catch clause declares nothing")
            kind = binding_site.kind
        if kind is NodeKind.TOKEN and binding_site.role == "identifier":
            return _symbol(binding_site)
        if kind in (
            NodeKind.PARAMETER,
            NodeKind.VARIABLE_DECLARATOR,
            NodeKind.CATCH_DECLARATION,
            NodeKind.FOREACH_STATEMENT,
            NodeKind.FROM_CLAUSE,
        ):
            identifier = binding_site.child("identifier")
            if identifier is not None:
                return _symbol(identifier)
        raise FactUnavailable(f"{kind.name} declares no symbol", binding_site.location)

    def reads_within(self, subtree: Node) -> Optional[frozenset[SymbolId]]:
        reads = set()
        for node in preorder(subtree):
            if node.kind is not NodeKind.IDENTIFIER_NAME or not self._is_read(node):
                continue
            binding = self.resolve(node)
            if binding is not None:
                reads.add(binding.symbol)
        return frozenset(reads)

    @staticmethod
    def _is_read(identifier: Node) -> bool:
        parent = identifier.parent
        if parent is None:
            return True
        if parent.kind is NodeKind.MEMBER_ACCESS and identifier.role == "name":
            return False
        if parent.kind is NodeKind.SIMPLE_ASSIGNMENT and identifier.role == "left":
            return False
        return True

    # -------------------------------------------------------------------------
    # Equivalence
    # -------------------------------------------------------------------------

    def structurally_equivalent(self, a: Node, b: Node) -> Optional[bool]:
        return self._signature(a) == self._signature(b)

    @staticmethod
    def _signature(node: Node) -> tuple:
        return tuple((item.kind, item.text) for item in preorder(node))
