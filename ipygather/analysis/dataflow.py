# -*- coding: utf-8 -*-
import ast
import logging
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Set, Tuple, Union

from ipygather.analysis.mixins import (
    SaveOffAttributesMixin,
    SkipUnboundArgsMixin,
    VisitListsMixin,
)
from ipygather.config import AnalyzerSettings
from ipygather.utils.ipython_utils import (
    python_cell_magic_body,
    transform_ipython_syntax,
)
from ipygather.utils.misc_utils import source_lines

logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]

# receivers that method calls never mutate, e.g. rewritten magics
_NEVER_MUTATED = frozenset({"get_ipython"})


class StatementFacts(NamedTuple):
    stmt_num: int
    first_line: int
    last_line: int
    defs: FrozenSet[str]
    uses: FrozenSet[str]

    @property
    def line_range(self) -> range:
        return range(self.first_line, self.last_line + 1)


class DefUseEdge(NamedTuple):
    def_stmt: int
    use_stmt: int
    name: str


class DependencyFacts(NamedTuple):
    statements: Tuple[StatementFacts, ...]
    edges: Tuple[DefUseEdge, ...]
    parsed: bool

    @classmethod
    def empty(cls) -> "DependencyFacts":
        return _EMPTY_FACTS

    @property
    def num_statements(self) -> int:
        return len(self.statements)

    def local_defs_for(self, stmt_num: int) -> Dict[str, int]:
        """
        Maps each name the given statement reads to the statement in the same
        cell that last defined it, for names defined earlier in the cell.
        """
        return {
            edge.name: edge.def_stmt for edge in self.edges if edge.use_stmt == stmt_num
        }


_EMPTY_FACTS = DependencyFacts((), (), parsed=False)


def _chain_root(node: ast.AST) -> ast.AST:
    while True:
        if isinstance(node, (ast.Attribute, ast.Subscript)):
            node = node.value
        elif isinstance(node, ast.Call):
            node = node.func
        else:
            break
    return node


def _target_names(target: ast.AST) -> Set[str]:
    return {
        node.id
        for node in ast.walk(target)
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store)
    }


class _LocalNameCollector(ast.NodeVisitor):
    """
    Collects the names a function body binds in its own scope, without
    descending into nested scopes.
    """

    def __init__(self) -> None:
        self.bound: Set[str] = set()
        self.declared_outer: Set[str] = set()

    def __call__(self, args: ast.arguments, body: List[ast.stmt]) -> Set[str]:
        for arg in [
            *getattr(args, "posonlyargs", []),
            *args.args,
            args.vararg,
            *args.kwonlyargs,
            args.kwarg,
        ]:
            if arg is not None:
                self.bound.add(arg.arg)
        for stmt in body:
            self.visit(stmt)
        return self.bound - self.declared_outer

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, (ast.Store, ast.Del)):
            self.bound.add(node.id)

    def visit_nested_scope(self, node: Union[FunctionNode, ast.ClassDef]) -> None:
        self.bound.add(node.name)

    visit_FunctionDef = visit_AsyncFunctionDef = visit_ClassDef = visit_nested_scope

    def visit_Lambda(self, node: ast.Lambda) -> None:
        return

    def visit_comprehension_scope(self, node: ast.AST) -> None:
        return

    visit_ListComp = visit_SetComp = visit_DictComp = visit_GeneratorExp = (
        visit_comprehension_scope
    )

    def visit_import(self, node: Union[ast.Import, ast.ImportFrom]) -> None:
        for alias in node.names:
            if alias.name != "*":
                self.bound.add(alias.asname or alias.name.split(".")[0])

    visit_Import = visit_ImportFrom = visit_import

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.name is not None:
            self.bound.add(node.name)
        self.generic_visit(node)

    def visit_pattern_capture(self, node: ast.AST) -> None:
        for attr in ("name", "rest"):
            name = getattr(node, attr, None)
            if name is not None:
                self.bound.add(name)
        self.generic_visit(node)

    visit_MatchAs = visit_MatchStar = visit_MatchMapping = visit_pattern_capture

    def visit_scope_declaration(self, node: Union[ast.Global, ast.Nonlocal]) -> None:
        self.declared_outer |= set(node.names)

    visit_Global = visit_Nonlocal = visit_scope_declaration


class ComputeStatementDefsAndUses(
    SaveOffAttributesMixin, SkipUnboundArgsMixin, VisitListsMixin, ast.NodeVisitor
):
    """
    Computes, for one top-level statement, the module-level names it defines
    (binds or mutates) and the names it reads before binding them itself.
    Nodes are visited in evaluation order, so `x = x + 1` both uses and
    defines `x` while `x = 1; print(x)` inside a block only defines it.
    """

    def __init__(self, settings: AnalyzerSettings) -> None:
        self._settings = settings
        self.defs: Set[str] = set()
        self.uses: Set[str] = set()
        # names already bound in the scope currently being visited
        self.bound: Set[str] = set()
        self._module_scope = True

    def __call__(self, node: ast.AST) -> Tuple[Set[str], Set[str]]:
        self.visit(node)
        return self.defs, self.uses

    def _use(self, name: str) -> None:
        if name not in self.bound:
            self.uses.add(name)

    def _bind(self, name: str) -> None:
        self.bound.add(name)
        if self._module_scope:
            self.defs.add(name)

    def _mutate(self, name: str) -> None:
        self._use(name)
        if self._module_scope:
            self.defs.add(name)

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, ast.Store):
            self._bind(node.id)
        else:
            self._use(node.id)

    def visit_attrsub(self, node: Union[ast.Attribute, ast.Subscript]) -> None:
        self.visit(node.value)
        if isinstance(node, ast.Subscript):
            self.visit(node.slice)
        if isinstance(node.ctx, (ast.Store, ast.Del)):
            root = _chain_root(node)
            if isinstance(root, ast.Name):
                self._mutate(root.id)

    visit_Attribute = visit_Subscript = visit_attrsub

    def visit_Assign(self, node: ast.Assign) -> None:
        self.visit(node.value)
        self.visit(node.targets)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        self.visit(node.annotation)
        if node.value is None:
            # a bare annotation binds nothing at runtime
            return
        self.visit(node.value)
        self.visit(node.target)

    def visit_AugAssign(self, node: ast.AugAssign) -> None:
        self.visit(node.value)
        if isinstance(node.target, ast.Name):
            self._use(node.target.id)
            self._bind(node.target.id)
        else:
            self.visit(node.target)

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        self.visit(node.value)
        self.visit(node.target)

    def visit_import(self, node: Union[ast.Import, ast.ImportFrom]) -> None:
        for alias in node.names:
            # TODO: star imports bind names we cannot see without importing the module
            if alias.name == "*":
                continue
            self._bind(alias.asname or alias.name.split(".")[0])

    visit_Import = visit_ImportFrom = visit_import

    def visit_Expr(self, node: ast.Expr) -> None:
        self.visit(node.value)
        call = node.value
        if not self._settings.method_calls_mutate_receiver:
            return
        if not isinstance(call, ast.Call) or not isinstance(call.func, ast.Attribute):
            return
        if call.func.attr in self._settings.nonmutating_methods:
            return
        root = _chain_root(call.func.value)
        if isinstance(root, ast.Name) and root.id not in _NEVER_MUTATED:
            self._mutate(root.id)

    def _visit_branches(self, *branches) -> None:
        before = self.bound
        bound_per_branch: List[Set[str]] = []
        for branch in branches:
            with self.push_attributes(bound=set(before)):
                self.visit(branch)
                bound_per_branch.append(self.bound)
        self.bound = before | set.intersection(*bound_per_branch)

    def visit_If(self, node: ast.If) -> None:
        self.visit(node.test)
        self._visit_branches(node.body, node.orelse)

    def visit_While(self, node: ast.While) -> None:
        self.visit(node.test)
        self._visit_branches(node.body, node.orelse)

    def visit_loop(self, node: Union[ast.For, ast.AsyncFor]) -> None:
        self.visit(node.iter)
        self._visit_branches([node.target, *node.body], node.orelse)

    visit_For = visit_AsyncFor = visit_loop

    def visit_Try(self, node: ast.Try) -> None:
        self._visit_branches([*node.body, *node.orelse], *node.handlers)
        self.visit(node.finalbody)

    visit_TryStar = visit_Try

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        self.visit(node.type)
        if node.name is not None:
            self._bind(node.name)
        self.visit(node.body)

    def visit_Match(self, node) -> None:
        self.visit(node.subject)
        self._visit_branches(*[[case.pattern, case.guard, *case.body] for case in node.cases])

    def visit_pattern_capture(self, node) -> None:
        self.generic_visit(node)
        for attr in ("name", "rest"):
            name = getattr(node, attr, None)
            if name is not None:
                self._bind(name)

    visit_MatchAs = visit_MatchStar = visit_MatchMapping = visit_pattern_capture

    def _visit_function_body(self, args: ast.arguments, body) -> None:
        local_names = _LocalNameCollector()(args, body)
        with self.push_attributes(
            bound=self.bound | local_names, _module_scope=False
        ):
            self.visit(body)

    def visit_function_def(self, node: FunctionNode) -> None:
        self.visit(node.decorator_list)
        self.visit(node.args)
        self.visit(node.returns)
        # bind first so that recursive references are not treated as reads
        self._bind(node.name)
        self._visit_function_body(node.args, node.body)

    visit_FunctionDef = visit_AsyncFunctionDef = visit_function_def

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self.visit(node.args)
        self._visit_function_body(node.args, [node.body])

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self.visit(node.decorator_list)
        self.visit(node.bases)
        self.visit(node.keywords)
        with self.push_attributes(
            bound=self.bound | {node.name}, _module_scope=False
        ):
            self.visit(node.body)
        self._bind(node.name)

    def visit_comprehension_scope(self, node) -> None:
        generators: List[ast.comprehension] = node.generators
        # the outermost iterable is evaluated in the enclosing scope
        self.visit(generators[0].iter)
        with self.push_attributes(bound=set(self.bound)):
            for idx, gen in enumerate(generators):
                if idx > 0:
                    self.visit(gen.iter)
                self.bound |= _target_names(gen.target)
                self.visit(gen.ifs)
            if isinstance(node, ast.DictComp):
                self.visit(node.key)
                self.visit(node.value)
            else:
                self.visit(node.elt)

    visit_ListComp = visit_SetComp = visit_DictComp = visit_GeneratorExp = (
        visit_comprehension_scope
    )

    def visit_scope_declaration(self, node: Union[ast.Global, ast.Nonlocal]) -> None:
        return

    visit_Global = visit_Nonlocal = visit_scope_declaration


def compute_statement_defs_and_uses(
    node: Union[ast.AST, str], settings: Optional[AnalyzerSettings] = None
) -> Tuple[Set[str], Set[str]]:
    if isinstance(node, str):
        node = ast.parse(node)
    return ComputeStatementDefsAndUses(settings or AnalyzerSettings())(node)


def compute_def_use_edges(statements: Tuple[StatementFacts, ...]) -> Tuple[DefUseEdge, ...]:
    last_def_by_name: Dict[str, int] = {}
    edges: List[DefUseEdge] = []
    for stmt in statements:
        for name in sorted(stmt.uses):
            def_stmt = last_def_by_name.get(name)
            if def_stmt is not None:
                edges.append(DefUseEdge(def_stmt, stmt.stmt_num, name))
        for name in stmt.defs:
            last_def_by_name[name] = stmt.stmt_num
    return tuple(edges)


def _first_line(stmt: ast.stmt) -> int:
    decorators = getattr(stmt, "decorator_list", None) or []
    return min([stmt.lineno] + [dec.lineno for dec in decorators])


class DataflowAnalyzer:
    def __init__(self, settings: Optional[AnalyzerSettings] = None) -> None:
        self.settings = settings or AnalyzerSettings()

    def analyze(self, text: str) -> DependencyFacts:
        """
        Computes def / use facts for every top-level statement of a cell.
        Cells that cannot be analyzed produce empty facts instead of raising,
        so that one bad cell cannot take down the rest of the session.
        """
        try:
            return self._analyze(text)
        except SyntaxError as e:
            logger.warning("unable to parse cell; assuming no dependencies: %s", e)
        except Exception:
            logger.exception("unexpected failure while analyzing cell")
        return DependencyFacts.empty()

    def _defs_and_uses(self, node: ast.AST) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        defs, uses = compute_statement_defs_and_uses(node, settings=self.settings)
        return frozenset(defs), frozenset(uses)

    def _analyze(self, text: str) -> DependencyFacts:
        lines = source_lines(text)
        # ipython drops leading blank lines and normalizes trailing ones when
        # transforming a cell, so strip both here and shift line numbers back
        # afterwards
        offset, end = 0, len(lines)
        while offset < end and len(lines[offset].strip()) == 0:
            offset += 1
        while end > offset and len(lines[end - 1].strip()) == 0:
            end -= 1
        if offset == end:
            return DependencyFacts((), (), parsed=True)
        body_text = "\n".join(lines[offset:end])
        source = body_text
        if self.settings.transform_ipython_syntax:
            source = transform_ipython_syntax(body_text)
        tree = ast.parse(source)
        source_line_count = len(source_lines(source.rstrip("\r\n")))
        if source_line_count != end - offset:
            return self._analyze_as_single_statement(body_text, tree, offset + 1, end)
        statements = []
        for stmt_num, stmt in enumerate(tree.body):
            defs, uses = self._defs_and_uses(stmt)
            statements.append(
                StatementFacts(
                    stmt_num=stmt_num,
                    first_line=_first_line(stmt) + offset,
                    last_line=(stmt.end_lineno or stmt.lineno) + offset,
                    defs=defs,
                    uses=uses,
                )
            )
        stmt_tuple = tuple(statements)
        return DependencyFacts(
            stmt_tuple, compute_def_use_edges(stmt_tuple), parsed=True
        )

    def _analyze_as_single_statement(
        self, text: str, tree: ast.Module, first_line: int, last_line: int
    ) -> DependencyFacts:
        # the rewrite folded several lines together (e.g. a cell magic), so
        # statement boundaries no longer line up with the original text
        defs: Set[str] = set()
        uses: Set[str] = set()
        stmts = list(tree.body)
        body = python_cell_magic_body(text)
        if body is not None:
            stmts.extend(ast.parse(body).body)
        for stmt in stmts:
            stmt_defs, stmt_uses = self._defs_and_uses(stmt)
            uses |= stmt_uses - defs
            defs |= stmt_defs
        stmt_facts = (
            StatementFacts(0, first_line, last_line, frozenset(defs), frozenset(uses)),
        )
        return DependencyFacts(stmt_facts, (), parsed=True)
