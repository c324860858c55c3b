"""
Dispatch and aggregation for the redundancy engine.

The engine walks one tree once, in pre-order. At every node it looks up the
rules subscribed to the node's kind in a table built once from the catalog,
invokes each of them with a facts handle scoped to the pass, and collects the
findings. A rule that raises is isolated: its contribution for that node is
dropped and logged, and the walk continues with the remaining rules.

After the walk, aggregation merges the spans of all findings per
classification into a minimal non-overlapping set and orders the result.

Example:
    engine = RedundancyEngine()
    for redundancy in engine.run(tree, SyntacticFacts(tree)):
        print(redundancy)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from greyout.engine.config import EngineConfiguration
from greyout.engine.rules import Finding, Rule, RuleLevel
from greyout.engine.spans import CLASS_ORDER, Span, SpanClass, merge
from greyout.semantics.facts import FactsHandle, SemanticFacts
from greyout.semantics.syntactic import SyntacticFacts
from greyout.syntax.nodes import Node, NodeKind, SyntaxTree
from greyout.utils.errors import EngineStateError, InvalidSpan, PassAbandoned, RuleFault


logger = logging.getLogger("greyout.engine")


# =============================================================================
# Dispatch Table
# =============================================================================


class DispatchTable:
    """
    Node-kind keyed table of rules, built once.

    Rules keep catalog order within each kind, which makes invocation order,
    and therefore output, reproducible.
    """

    def __init__(self, rules: Iterable[Rule]) -> None:
        self.rules = tuple(rules)
        table: dict[NodeKind, list[Rule]] = {}
        seen: set[str] = set()
        for rule in self.rules:
            if rule.code in seen:
                raise ValueError(f"duplicate rule code {rule.code}")
            seen.add(rule.code)
            for kind in rule.kinds:
                table.setdefault(kind, []).append(rule)
        self._table = {kind: tuple(entries) for kind, entries in table.items()}

    @classmethod
    def default(cls, config: Optional[EngineConfiguration] = None) -> DispatchTable:
        """Build a table from the built-in catalog, leaving out disabled rules."""
        from greyout.rules import CATALOG

        config = config or EngineConfiguration()
        return cls(rule for rule in CATALOG if config.is_enabled(rule))

    def rules_for(self, kind: NodeKind) -> tuple[Rule, ...]:
        return self._table.get(kind, ())

    @property
    def kinds(self) -> frozenset[NodeKind]:
        return frozenset(self._table)

    def __len__(self) -> int:
        return len(self.rules)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Redundancy:
    """
    One merged, reportable redundancy.

    Attributes:
        rule: The rule whose span starts earliest in the merged region
        span: The merged span
        node: The node the primary rule was invoked for
        level: Effective reporting level of the primary rule
        merged_rules: Codes of every rule that contributed to the region
    """

    rule: Rule
    span: Span
    node: Node
    level: RuleLevel = RuleLevel.HINT
    merged_rules: tuple[str, ...] = ()

    @property
    def classification(self) -> SpanClass:
        return self.span.classification

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    def sort_key(self) -> tuple[int, int, int, str]:
        return (self.span.start, self.span.end, CLASS_ORDER[self.span.classification], self.rule.code)

    def __str__(self) -> str:
        return f"[{self.rule.code}] {self.node.location}: {self.rule.message} {self.span}"


def aggregate(
    findings: Sequence[Finding],
    config: Optional[EngineConfiguration] = None,
) -> tuple[Redundancy, ...]:
    """
    Merge findings into an ordered, non-overlapping set of redundancies.

    Spans of the same classification that touch or overlap, whether they come
    from one finding or several, collapse into one region. The region is
    attributed to the contributor whose span starts first; ties go to the
    finding collected first.

    Args:
        findings: Findings in collection order
        config: Configuration used to resolve reporting levels

    Returns:
        Redundancies sorted by (start, end, classification, rule code)
    """
    config = config or EngineConfiguration()
    entries = [
        (span, order, finding)
        for order, finding in enumerate(findings)
        for span in finding.spans
    ]
    entries.sort(key=lambda entry: (entry[0].start, entry[0].end, entry[1]))

    results = []
    for region in merge(span for span, _, _ in entries):
        contributors = [
            entry for entry in entries
            if entry[0].classification is region.classification and region.contains(entry[0])
        ]
        primary = contributors[0][2]
        codes: list[str] = []
        for _, _, finding in contributors:
            if finding.rule.code not in codes:
                codes.append(finding.rule.code)
        results.append(
            Redundancy(
                rule=primary.rule,
                span=region,
                node=primary.node,
                level=config.get_level(primary.rule),
                merged_rules=tuple(codes),
            )
        )

    results.sort(key=Redundancy.sort_key)
    return tuple(results)


# =============================================================================
# Engine
# =============================================================================


class EngineState(Enum):
    """Lifecycle of a single-use engine."""

    NOT_STARTED = auto()
    TRAVERSING = auto()
    AGGREGATING = auto()
    DONE = auto()
    ABANDONED = auto()


class RedundancyEngine:
    """
    Single-use engine that analyzes exactly one tree.

    States move NOT_STARTED -> TRAVERSING -> AGGREGATING -> DONE. A pass that
    is abandoned, or that fails in strict mode, ends in ABANDONED with its
    partial findings discarded.

    Example:
        engine = RedundancyEngine(config=EngineConfiguration(strict=True))
        results = engine.run(tree, oracle)
        assert engine.state is EngineState.DONE
    """

    def __init__(
        self,
        table: Optional[DispatchTable] = None,
        config: Optional[EngineConfiguration] = None,
    ) -> None:
        self.config = config or EngineConfiguration()
        self.table = table if table is not None else DispatchTable.default(self.config)
        self.faults: list[RuleFault] = []
        self.nodes_visited = 0
        self._state = EngineState.NOT_STARTED
        self._abandon = threading.Event()
        self._findings: list[Finding] = []
        self._results: tuple[Redundancy, ...] = ()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def results(self) -> tuple[Redundancy, ...]:
        if self._state is not EngineState.DONE:
            raise EngineStateError(f"results are not available in state {self._state.name}")
        return self._results

    @property
    def findings(self) -> tuple[Finding, ...]:
        """Raw findings before aggregation, available once the pass is done."""
        if self._state is not EngineState.DONE:
            raise EngineStateError(f"findings are not available in state {self._state.name}")
        return tuple(self._findings)

    def abandon(self) -> None:
        """
        Request that the current pass stop.

        Safe to call from another thread or from inside the oracle. The walk
        stops before the next node and nothing collected so far is kept.
        """
        self._abandon.set()

    def run(self, tree: SyntaxTree, oracle: Optional[SemanticFacts] = None) -> tuple[Redundancy, ...]:
        """
        Analyze a tree.

        Args:
            tree: The tree to analyze
            oracle: Semantic oracle bound to the tree; defaults to SyntacticFacts

        Returns:
            The ordered redundancies for the tree

        Raises:
            EngineStateError: If the engine has already been used
            PassAbandoned: If the pass was abandoned before it completed
        """
        if self._state is not EngineState.NOT_STARTED:
            raise EngineStateError(f"engine is single-use and already {self._state.name}")

        facts = FactsHandle(oracle if oracle is not None else SyntacticFacts(tree), tree)
        self._state = EngineState.TRAVERSING
        try:
            self._traverse(tree, facts)
        except Exception as e:
            self._findings.clear()
            self._state = EngineState.ABANDONED
            if isinstance(e, PassAbandoned):
                logger.info(f"pass over {tree.filename or '<tree>'} abandoned after {self.nodes_visited} nodes")
            raise
        finally:
            facts.close()

        self._state = EngineState.AGGREGATING
        self._results = aggregate(self._findings, self.config)
        self._state = EngineState.DONE
        logger.debug(
            f"{len(self._results)} redundancies from {len(self._findings)} findings "
            f"over {self.nodes_visited} nodes ({facts.queries} fact queries)"
        )
        return self._results

    def _traverse(self, tree: SyntaxTree, facts: FactsHandle) -> None:
        length = len(tree.source)
        for node in tree.walk():
            if self._abandon.is_set():
                raise PassAbandoned("pass abandoned", node.location)
            self.nodes_visited += 1
            for rule in self.table.rules_for(node.kind):
                # A prebuilt table may hold rules the configuration disables
                if self.config.is_enabled(rule):
                    self._invoke(rule, node, facts, length)

    def _invoke(self, rule: Rule, node: Node, facts: FactsHandle, length: int) -> None:
        try:
            findings = rule.evaluate(node, facts)
            for finding in findings:
                for span in finding.spans:
                    span.check_bounds(length)
        except PassAbandoned:
            raise
        except InvalidSpan as e:
            if self.config.strict:
                raise
            logger.error(f"{rule} produced an invalid span at {node.location}: {e.message}")
            self.faults.append(RuleFault(rule.code, node, e))
            return
        except Exception as e:
            fault = RuleFault(rule.code, node, e)
            if self.config.strict:
                raise fault from e
            logger.exception(f"{rule} failed at {node.location}")
            self.faults.append(fault)
            return
        self._findings.extend(findings)


# =============================================================================
# Convenience Functions
# =============================================================================


def analyze_tree(
    tree: SyntaxTree,
    oracle: Optional[SemanticFacts] = None,
    config: Optional[EngineConfiguration] = None,
    table: Optional[DispatchTable] = None,
) -> tuple[Redundancy, ...]:
    """
    Analyze one tree with a fresh engine.

    Args:
        tree: The tree to analyze
        oracle: Semantic oracle for the tree; defaults to SyntacticFacts
        config: Optional engine configuration
        table: Optional prebuilt dispatch table

    Returns:
        The ordered redundancies for the tree
    """
    return RedundancyEngine(table, config).run(tree, oracle)


def analyze_trees(
    trees: Iterable[SyntaxTree],
    oracle_factory: Callable[[SyntaxTree], SemanticFacts] = SyntacticFacts,
    config: Optional[EngineConfiguration] = None,
    max_workers: Optional[int] = None,
) -> list[tuple[Redundancy, ...]]:
    """
    Analyze independent trees, optionally in parallel.

    Every tree gets its own engine, oracle and facts handle; only the
    immutable dispatch table is shared.

    Args:
        trees: Trees to analyze
        oracle_factory: Builds the oracle for one tree
        config: Optional engine configuration
        max_workers: Thread count; None or 1 runs sequentially

    Returns:
        One result tuple per tree, in input order
    """
    table = DispatchTable.default(config)

    def run_one(tree: SyntaxTree) -> tuple[Redundancy, ...]:
        return RedundancyEngine(table, config).run(tree, oracle_factory(tree))

    if max_workers is None or max_workers <= 1:
        return [run_one(tree) for tree in trees]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(run_one, trees))
