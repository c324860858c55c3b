"""
Tests for control-flow redundancy rules.

Tests cover:
- Constant if, while and for conditions
- Unreachable code after jumps
- Switches and switch sections without effect
- Catch filters and catch types that add nothing
"""

from greyout.engine.edits import apply_removals
from greyout.engine.spans import SpanClass
from greyout.rules.control_flow import (
    CONSTANT_FALSE_CONDITION,
    CONSTANT_FALSE_FOR,
    CONSTANT_FALSE_WHILE,
    CONSTANT_TRUE_CATCH_FILTER,
    CONSTANT_TRUE_CONDITION,
    EMPTY_SWITCH_SECTION,
    NEEDLESS_CATCH_TYPE,
    SWITCH_WITHOUT_EFFECT,
    UNREACHABLE_CODE,
)
from greyout.syntax.builders import (
    assign,
    block,
    break_,
    call,
    case_,
    catch_,
    default_,
    expr_stmt,
    for_,
    if_,
    labeled,
    local,
    member,
    param,
    return_,
    section,
    switch_,
    throw_,
    try_,
    var_decl,
    while_,
)


def stmt(name, *args):
    return expr_stmt(call(name, *args))


def removed(tree, findings):
    return apply_removals(tree.source, [span for finding in findings for span in finding.spans])


FLAG = [param("bool", "flag")]


# =============================================================================
# Constant Conditions
# =============================================================================


class TestConstantTrueCondition:
    """Tests for if statements whose test is always true."""

    def test_unwraps_block(self, method_tree, run_rule, span_texts) -> None:
        """Test that the header and braces are removed, keeping the body."""
        tree = method_tree(if_(True, block(stmt("A"))))
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert len(findings) == 1
        assert span_texts(tree, findings[0]) == ("if (true) {", "}")

    def test_removes_else_branch(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test that an else branch is a second finding."""
        tree = method_tree(if_(True, block(stmt("A")), block(stmt("B"))))
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert len(findings) == 2
        assert span_texts(tree, findings[0]) == ("if (true) {", "}")
        (else_text,) = span_texts(tree, findings[1])
        assert else_text.startswith("else {") and else_text.endswith("}")
        assert squash(removed(tree, findings)) == squash(method_tree(stmt("A")).source)

    def test_embedded_body(self, method_tree, run_rule, span_texts) -> None:
        """Test that a body without braces keeps everything after the header."""
        tree = method_tree(if_(True, stmt("A")))
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert span_texts(tree, findings[0]) == ("if (true)",)

    def test_block_with_locals_keeps_braces(self, method_tree, run_rule, span_texts) -> None:
        """Test that a block declaring locals keeps its scope."""
        tree = method_tree(if_(True, block(local("int", "y", 1), stmt("A", "y"))))
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert span_texts(tree, findings[0]) == ("if (true)",)

    def test_const_local_condition(self, method_tree, run_rule, span_texts) -> None:
        """Test that a const local folds into the condition."""
        tree = method_tree(local("bool", "on", True, const=True), if_("on", block(stmt("A"))))
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert span_texts(tree, findings[0]) == ("if (on) {", "}")

    def test_parameter_condition(self, method_tree, run_rule) -> None:
        """Test that a runtime condition is left alone."""
        tree = method_tree(if_("flag", block(stmt("A"))), params=FLAG)
        assert run_rule(CONSTANT_TRUE_CONDITION, tree) == []

    def test_stubbed_condition(self, method_tree, run_rule, stub_facts, span_texts) -> None:
        """Test that the rule follows the oracle's answer."""
        tree = method_tree(if_("flag", stmt("A")), params=FLAG)
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree, stub_facts(tree, constants={"flag": True}))
        assert span_texts(tree, findings[0]) == ("if (flag)",)

    def test_loop_body_keeps_braces(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test that an if serving as a loop body keeps the braces around several statements."""
        tree = method_tree(while_("flag", if_(True, block(stmt("A"), stmt("B")))), params=FLAG)
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert span_texts(tree, findings[0]) == ("if (true)",)
        assert "while(flag){A();B();}" in squash(removed(tree, findings))

    def test_else_if_keeps_braces(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test that an else-if chain keeps both statements under the else."""
        tree = method_tree(
            if_("flag", block(stmt("X")), if_(True, block(stmt("A"), stmt("B")))),
            params=FLAG,
        )
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert span_texts(tree, findings[0]) == ("if (true)",)
        assert "else{A();B();}" in squash(removed(tree, findings))

    def test_loop_body_single_statement_unwraps(self, method_tree, run_rule, span_texts) -> None:
        """Test that one statement may still take the place of the block."""
        tree = method_tree(while_("flag", if_(True, block(stmt("A")))), params=FLAG)
        findings = run_rule(CONSTANT_TRUE_CONDITION, tree)
        assert span_texts(tree, findings[0]) == ("if (true) {", "}")


class TestConstantFalseCondition:
    """Tests for if statements whose test is always false."""

    def test_removes_whole_statement(self, method_tree, run_rule, span_texts) -> None:
        """Test that an if without else disappears entirely."""
        tree = method_tree(if_(False, block(stmt("A"))))
        findings = run_rule(CONSTANT_FALSE_CONDITION, tree)
        assert len(findings) == 1
        assert span_texts(tree, findings[0]) == ("if (false) {\n            A();\n        }",)
        assert findings[0].spans[0].classification is SpanClass.UNNECESSARY

    def test_embedded_statement_flagged(self, method_tree, run_rule, span_texts) -> None:
        """Test that an if that is another statement's body is only flagged."""
        tree = method_tree(if_("flag", if_(False, stmt("A"))), params=FLAG)
        findings = run_rule(CONSTANT_FALSE_CONDITION, tree)
        assert len(findings) == 1
        assert findings[0].spans[0].classification is SpanClass.FLAGGED

    def test_keeps_else_block(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test that only the else body survives."""
        tree = method_tree(if_(False, block(stmt("A")), block(stmt("B"))))
        findings = run_rule(CONSTANT_FALSE_CONDITION, tree)
        head, tail = span_texts(tree, findings[0])
        assert head.startswith("if (false) {") and head.endswith("} else {")
        assert tail == "}"
        assert squash(removed(tree, findings)) == squash(method_tree(stmt("B")).source)

    def test_keeps_embedded_else(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test an else body without braces."""
        tree = method_tree(if_(False, stmt("A"), stmt("B")))
        findings = run_rule(CONSTANT_FALSE_CONDITION, tree)
        (text,) = span_texts(tree, findings[0])
        assert text.startswith("if (false)") and text.endswith("else")
        assert squash(removed(tree, findings)) == squash(method_tree(stmt("B")).source)

    def test_true_condition_ignored(self, method_tree, run_rule) -> None:
        """Test that a true condition is not this rule's business."""
        assert run_rule(CONSTANT_FALSE_CONDITION, method_tree(if_(True, stmt("A")))) == []

    def test_loop_body_keeps_else_braces(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test that an else block with several statements stays a block inside a loop."""
        tree = method_tree(while_("flag", if_(False, stmt("X"), block(stmt("A"), stmt("B")))), params=FLAG)
        findings = run_rule(CONSTANT_FALSE_CONDITION, tree)
        (text,) = span_texts(tree, findings[0])
        assert text.startswith("if (false)") and text.endswith("else")
        assert "while(flag){A();B();}" in squash(removed(tree, findings))


class TestConstantFalseLoops:
    """Tests for loops that never run."""

    def test_while_false(self, method_tree, run_rule, span_texts) -> None:
        """Test that a never-entered while loop is removed."""
        tree = method_tree(while_(False, block(stmt("A"))))
        findings = run_rule(CONSTANT_FALSE_WHILE, tree)
        (text,) = span_texts(tree, findings[0])
        assert text.startswith("while (false) {") and text.endswith("}")

    def test_while_runtime_condition(self, method_tree, run_rule) -> None:
        """Test that a runtime loop condition is left alone."""
        assert run_rule(CONSTANT_FALSE_WHILE, method_tree(while_("flag", block()), params=FLAG)) == []

    def test_for_without_initializer(self, method_tree, run_rule, span_texts) -> None:
        """Test that a bare never-entered for loop is removed."""
        tree = method_tree(for_(None, False, [], block()))
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        assert span_texts(tree, findings[0]) == ("for (; false;) { }",)

    def test_for_keeps_declaration(self, method_tree, run_rule, span_texts, squash) -> None:
        """Test that the loop declaration still runs once as a statement."""
        tree = method_tree(for_(var_decl("int", "i", 0), False, [assign("+=", "i", 1)], block(stmt("A", "i"))))
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        head, rest = span_texts(tree, findings[0])
        assert head == "for ("
        assert rest.startswith("false; i += 1)") and rest.endswith("}")
        assert squash(removed(tree, findings)) == squash(method_tree(local("int", "i", 0)).source)

    def test_for_with_several_initializers_flagged(self, method_tree, run_rule) -> None:
        """Test that several initializer expressions cannot be kept mechanically."""
        tree = method_tree(
            for_([assign("=", "i", 0), assign("=", "j", 0)], False, [], block()),
            params=[param("int", "i"), param("int", "j")],
        )
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        assert findings[0].classifications == frozenset({SpanClass.FLAGGED})

    def test_embedded_for_with_declaration_flagged(self, method_tree, run_rule) -> None:
        """Test that an embedded loop with a declaration is only flagged."""
        tree = method_tree(if_("flag", for_(var_decl("int", "i", 0), False, [], block())), params=FLAG)
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        assert findings[0].classifications == frozenset({SpanClass.FLAGGED})

    def test_declaration_clashing_with_later_local_flagged(self, method_tree, run_rule) -> None:
        """Test that keeping the declaration would redeclare a local of the enclosing block."""
        tree = method_tree(for_(var_decl("int", "i", 0), False, [], block()), local("int", "i", 1))
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        assert findings[0].classifications == frozenset({SpanClass.FLAGGED})

    def test_declaration_clashing_with_sibling_loop_flagged(self, method_tree, run_rule) -> None:
        """Test that another loop declaring the same variable also blocks the rewrite."""
        tree = method_tree(
            for_(var_decl("int", "i", 0), False, [], block()),
            for_(var_decl("int", "i", 0), "flag", [], block()),
            params=FLAG,
        )
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        assert len(findings) == 1
        assert findings[0].classifications == frozenset({SpanClass.FLAGGED})

    def test_declaration_with_distinct_names_kept(self, method_tree, run_rule) -> None:
        """Test that unrelated locals in the enclosing block do not matter."""
        tree = method_tree(for_(var_decl("int", "i", 0), False, [], block()), local("int", "j", 1))
        findings = run_rule(CONSTANT_FALSE_FOR, tree)
        assert len(findings[0].spans) == 2
        assert findings[0].classifications == frozenset({SpanClass.UNNECESSARY})


# =============================================================================
# Unreachable Code
# =============================================================================


class TestUnreachableCode:
    """Tests for code after an unconditional jump."""

    def test_after_return(self, method_tree, run_rule, span_texts) -> None:
        """Test that everything after a return is flagged as one span."""
        tree = method_tree(return_(), stmt("A"), stmt("B"))
        findings = run_rule(UNREACHABLE_CODE, tree)
        assert len(findings) == 1
        assert span_texts(tree, findings[0]) == ("A();\n        B();",)
        assert findings[0].spans[0].classification is SpanClass.FLAGGED

    def test_after_throw(self, method_tree, run_rule, span_texts) -> None:
        """Test that throw ends reachability too."""
        tree = method_tree(throw_(), stmt("A"))
        assert span_texts(tree, run_rule(UNREACHABLE_CODE, tree)[0]) == ("A();",)

    def test_label_makes_code_reachable(self, method_tree, run_rule) -> None:
        """Test that a label after the jump may be a goto target."""
        tree = method_tree(return_(), labeled("done", stmt("A")))
        assert run_rule(UNREACHABLE_CODE, tree) == []

    def test_jump_last(self, method_tree, run_rule) -> None:
        """Test that a final jump leaves nothing unreachable."""
        assert run_rule(UNREACHABLE_CODE, method_tree(stmt("A"), return_())) == []

    def test_in_switch_section(self, method_tree, run_rule, span_texts) -> None:
        """Test code after break in a switch section."""
        tree = method_tree(
            switch_("x", section([case_(1)], break_(), stmt("A"))),
            params=[param("int", "x")],
        )
        findings = run_rule(UNREACHABLE_CODE, tree)
        assert span_texts(tree, findings[0]) == ("A();",)


# =============================================================================
# Switches
# =============================================================================


class TestSwitchWithoutEffect:
    """Tests for switches whose every section only breaks."""

    def test_removes_switch(self, method_tree, run_rule, span_texts) -> None:
        """Test that a do-nothing switch over a variable is removable."""
        tree = method_tree(
            switch_("x", section([case_(1)], break_()), section([default_()], break_())),
            params=[param("int", "x")],
        )
        findings = run_rule(SWITCH_WITHOUT_EFFECT, tree)
        (text,) = span_texts(tree, findings[0])
        assert text.startswith("switch (x) {") and text.endswith("}")
        assert findings[0].classifications == frozenset({SpanClass.UNNECESSARY})

    def test_call_in_governing_expression_flagged(self, method_tree, run_rule) -> None:
        """Test that a governing expression with possible effects is only flagged."""
        tree = method_tree(switch_(call("Next"), section([case_(1)], break_())))
        findings = run_rule(SWITCH_WITHOUT_EFFECT, tree)
        assert findings[0].classifications == frozenset({SpanClass.FLAGGED})

    def test_switch_with_work(self, method_tree, run_rule) -> None:
        """Test that a switch doing something is left alone."""
        tree = method_tree(
            switch_("x", section([case_(1)], break_()), section([case_(2)], stmt("A"), break_())),
            params=[param("int", "x")],
        )
        assert run_rule(SWITCH_WITHOUT_EFFECT, tree) == []


class TestEmptySwitchSection:
    """Tests for switch sections that only break."""

    def test_removes_empty_case(self, method_tree, run_rule, span_texts) -> None:
        """Test that a break-only case is removable without a default."""
        tree = method_tree(
            switch_("x", section([case_(1)], break_()), section([case_(2)], stmt("A"), break_())),
            params=[param("int", "x")],
        )
        findings = run_rule(EMPTY_SWITCH_SECTION, tree)
        assert len(findings) == 1
        (text,) = span_texts(tree, findings[0])
        assert text.startswith("case 1:") and text.endswith("break;")

    def test_default_with_work_keeps_case(self, method_tree, run_rule) -> None:
        """Test that removing a case would send it to a default that does work."""
        tree = method_tree(
            switch_("x", section([case_(1)], break_()), section([default_()], stmt("A"), break_())),
            params=[param("int", "x")],
        )
        assert run_rule(EMPTY_SWITCH_SECTION, tree) == []

    def test_empty_default(self, method_tree, run_rule, span_texts) -> None:
        """Test that a break-only default is removable along with break-only cases."""
        tree = method_tree(
            switch_(
                "x",
                section([case_(1)], break_()),
                section([case_(2)], stmt("A"), break_()),
                section([default_()], break_()),
            ),
            params=[param("int", "x")],
        )
        findings = run_rule(EMPTY_SWITCH_SECTION, tree)
        assert [span_texts(tree, f)[0].split(":")[0] for f in findings] == ["case 1", "default"]


# =============================================================================
# Catch Clauses
# =============================================================================


class TestCatchClauses:
    """Tests for catch filters and catch types."""

    def test_true_filter(self, method_tree, run_rule, span_texts) -> None:
        """Test that an always-true exception filter is removable."""
        tree = method_tree(try_(block(stmt("A")), catch_(block(), "Exception", "e", when=True)))
        findings = run_rule(CONSTANT_TRUE_CATCH_FILTER, tree)
        assert span_texts(tree, findings[0]) == ("when (true)",)

    def test_runtime_filter(self, method_tree, run_rule) -> None:
        """Test that a runtime filter is left alone."""
        tree = method_tree(try_(block(stmt("A")), catch_(block(), "Exception", when="flag")), params=FLAG)
        assert run_rule(CONSTANT_TRUE_CATCH_FILTER, tree) == []

    def test_unnamed_base_exception(self, method_tree, run_rule, span_texts) -> None:
        """Test that catching the base type is the same as a bare catch."""
        tree = method_tree(try_(block(stmt("A")), catch_(block(), "Exception")))
        findings = run_rule(NEEDLESS_CATCH_TYPE, tree)
        assert span_texts(tree, findings[0]) == ("(Exception)",)

    def test_unread_binding(self, method_tree, run_rule, span_texts) -> None:
        """Test that only the parenthesized declaration goes, not the clause."""
        tree = method_tree(try_(block(stmt("A")), catch_(block(stmt("B")), "System.Exception", "e")))
        findings = run_rule(NEEDLESS_CATCH_TYPE, tree)
        assert span_texts(tree, findings[0]) == ("(System.Exception e)",)

    def test_binding_read_in_body(self, method_tree, run_rule) -> None:
        """Test that a used exception variable keeps its declaration."""
        tree = method_tree(try_(block(stmt("A")), catch_(block(stmt("Log", "e")), "Exception", "e")))
        assert run_rule(NEEDLESS_CATCH_TYPE, tree) == []

    def test_binding_read_in_filter(self, method_tree, run_rule) -> None:
        """Test that a filter reading the variable keeps its declaration."""
        tree = method_tree(
            try_(block(stmt("A")), catch_(block(), "Exception", "e", when=member("e", "IsTransient"))),
        )
        assert run_rule(NEEDLESS_CATCH_TYPE, tree) == []

    def test_specific_exception(self, method_tree, run_rule) -> None:
        """Test that a derived exception type narrows the catch."""
        tree = method_tree(try_(block(stmt("A")), catch_(block(), "IOException")))
        assert run_rule(NEEDLESS_CATCH_TYPE, tree) == []
