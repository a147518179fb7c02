"""
Python Hooks Frontend.

This module provides the `PythonHooksFrontend`, which builds `ScopeSnapshot`s from
Python source written in the hooks idiom (ReactPy style)::

    from reactpy import component, use_state, use_ref, use_callback, use_effect

    LIMIT = 10

    @component
    def Counter(step):
        count, set_count = use_state(0)
        last = use_ref(count)

        increment = use_callback(lambda: set_count(count + step), [count, step])

        @use_effect(dependencies=[count])
        def remember():
            last.current = count

The frontend is an adapter: it only resolves references. All reasoning about
reactivity happens in the analysis pipeline.

Extraction proceeds in two passes over a LibCST tree:

1.  **Module Pass**: collects module bindings (assignments, definitions, imports),
    flags names bound more than once or declared ``global`` anywhere as reassigned,
    and records the module names each module-level function reads.
2.  **Scope Pass**: for every component (decorated with a component decorator) or
    custom hook (name with the hook prefix), collects parameters, state and
    reference cells, memoized computations, effects, local functions and derived
    values, together with their free names and declared dependency lists.

Memoized arguments are classified by the names they reference, never by their
syntactic shape: ``use_callback(make_handler(5), [...])`` and
``use_callback(lambda: make_handler(5)(), [...])`` produce the same captures.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider

from hookdeps.config import AnalyzerConfig
from hookdeps.core.model import Binding, Closure, ScopeSnapshot
from hookdeps.enums import ClosureRole, DeclarationForm
from hookdeps.errors import InputError
from hookdeps.frontends.free_names import BUILTIN_NAMES, free_names, parameter_nodes
from hookdeps.utils.node_source import capture_node_source, get_full_name

logger = logging.getLogger(__name__)

_OMITTED = object()

# Expressions that build a new object every time they are evaluated.
_FRESH_VALUES = (cst.Call, cst.List, cst.Dict, cst.Set, cst.ListComp, cst.DictComp, cst.SetComp)


@dataclass
class _LocalDecl:
  """
  Accumulator for one local closure while a scope body is walked.
  """

  name: str
  role: ClosureRole
  free: List[str] = field(default_factory=list)
  declared: Optional[List[str]] = None
  line: int = 0
  definitions: int = 1
  reassigned: bool = False
  fresh: bool = False


class PythonHooksFrontend:
  """
  Extracts scope snapshots from Python source using LibCST.

  Attributes:
      config (AnalyzerConfig): Supplies the hook vocabulary.
  """

  def __init__(self, config: Optional[AnalyzerConfig] = None):
    """
    Initializes the frontend.

    Args:
        config: Configuration holding hook names and the component decorators.
    """
    self.config = config or AnalyzerConfig()
    self._vocabulary: Set[str] = set(
      self.config.state_hooks + self.config.ref_hooks + self.config.memo_hooks + self.config.effect_hooks
    )

  # --- Public API ---

  def extract_file(self, path: Union[str, Path]) -> List[ScopeSnapshot]:
    """
    Reads and extracts a Python file.

    Args:
        path: Source file path.

    Returns:
        One snapshot per component or custom hook in the file.

    Raises:
        InputError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
      code = path.read_text("utf-8")
    except OSError as e:
      raise InputError(f"{path}: cannot read source ({e})") from e
    return self.extract(code, filename=str(path))

  def extract(self, code: str, filename: str = "<string>") -> List[ScopeSnapshot]:
    """
    Extracts snapshots from source text.

    Args:
        code: Python source.
        filename: Used for scope ids and locations.

    Returns:
        Snapshots in source order.

    Raises:
        InputError: If the code is not valid Python.
    """
    try:
      module = cst.parse_module(code)
    except cst.ParserSyntaxError as e:
      raise InputError(f"{filename}: {e}") from e

    wrapper = MetadataWrapper(module)
    positions = wrapper.resolve(PositionProvider)
    tree = wrapper.module

    module_bindings = _ModulePass().run(tree)
    snapshots: List[ScopeSnapshot] = []

    for stmt in tree.body:
      if isinstance(stmt, cst.FunctionDef) and self.is_scope(stmt):
        extractor = _ScopeExtractor(self, stmt, module_bindings, positions, filename)
        snapshots.append(extractor.run())

    logger.debug("%s: %d scopes extracted", filename, len(snapshots))
    return snapshots

  def is_scope(self, node: cst.FunctionDef) -> bool:
    """
    Decides whether a function is a re-invoked scope.

    Args:
        node: A module-level function definition.

    Returns:
        True for components (decorated) and custom hooks (prefixed name).
    """
    name = node.name.value
    if name in self._vocabulary:
      return False
    for decorator in node.decorators:
      expr = decorator.decorator.func if isinstance(decorator.decorator, cst.Call) else decorator.decorator
      if _leaf(expr) in self.config.component_decorators:
        return True
    return bool(self.config.hook_prefix) and name.startswith(self.config.hook_prefix)

  # --- Hook recognition ---

  def hook_kind(self, call: cst.BaseExpression) -> Optional[str]:
    """
    Classifies a call expression by the hook it invokes.

    Args:
        call: Any expression.

    Returns:
        "state", "ref", "memo", "effect", "custom" (a custom hook call) or None.
    """
    if not isinstance(call, cst.Call):
      return None
    leaf = _leaf(call.func)
    if leaf in self.config.state_hooks:
      return "state"
    if leaf in self.config.ref_hooks:
      return "ref"
    if leaf in self.config.memo_hooks:
      return "memo"
    if leaf in self.config.effect_hooks:
      return "effect"
    if self.config.hook_prefix and leaf and leaf.startswith(self.config.hook_prefix):
      return "custom"
    return None

  def is_vocabulary(self, name: str) -> bool:
    return name in self._vocabulary


class _ModulePass:
  """
  Collects module-level bindings and their reassignment status.
  """

  def __init__(self) -> None:
    self.counts: Dict[str, int] = {}
    self.captures: Dict[str, List[str]] = {}
    self.order: List[str] = []

  def run(self, module: cst.Module) -> List[Binding]:
    """
    Scans a module.

    Args:
        module: Parsed module.

    Returns:
        Module bindings in first-definition order.
    """
    self._walk(module.body)

    globals_scanner = _GlobalDeclarations()
    module.visit(globals_scanner)

    bindings = []
    for name in self.order:
      reassigned = self.counts[name] > 1 or name in globals_scanner.names
      bindings.append(
        Binding(
          name=name,
          declaration=DeclarationForm.MODULE,
          reassigned=reassigned,
          captures=self.captures.get(name, []),
        )
      )
    return bindings

  def _define(self, name: str) -> None:
    if name not in self.counts:
      self.counts[name] = 0
      self.order.append(name)
    self.counts[name] += 1

  def _walk(self, statements: Sequence[cst.CSTNode]) -> None:
    for stmt in statements:
      if isinstance(stmt, cst.SimpleStatementLine):
        for small in stmt.body:
          self._small_statement(small)
      elif isinstance(stmt, cst.FunctionDef):
        self._define(stmt.name.value)
        self.captures[stmt.name.value] = free_names(stmt)
      elif isinstance(stmt, cst.ClassDef):
        self._define(stmt.name.value)
      elif isinstance(stmt, (cst.If, cst.Try, cst.With, cst.For, cst.While)):
        if isinstance(stmt, cst.For):
          for name in _target_names(stmt.target):
            self._define(name)
        for block in _child_blocks(stmt):
          self._walk(block)

  def _small_statement(self, small: cst.BaseSmallStatement) -> None:
    if isinstance(small, cst.Assign):
      for target in small.targets:
        for name in _target_names(target.target):
          self._define(name)
    elif isinstance(small, cst.AnnAssign):
      # A bare annotation declares nothing.
      if small.value is not None:
        for name in _target_names(small.target):
          self._define(name)
    elif isinstance(small, cst.AugAssign):
      for name in _target_names(small.target):
        self._define(name)
        self._define(name)
    elif isinstance(small, cst.Import):
      for alias in small.names:
        if alias.asname:
          self._define(alias.asname.name.value)
        else:
          self._define(get_full_name(alias.name).split(".")[0])
    elif isinstance(small, cst.ImportFrom) and not isinstance(small.names, cst.ImportStar):
      for alias in small.names:
        self._define(alias.asname.name.value if alias.asname else alias.name.value)


class _GlobalDeclarations(cst.CSTVisitor):
  """Collects every name declared ``global`` anywhere in a module."""

  def __init__(self) -> None:
    self.names: Set[str] = set()

  def visit_Global(self, node: cst.Global) -> None:
    self.names.update(item.name.value for item in node.names)


class _NonlocalDeclarations(cst.CSTVisitor):
  """Collects every name declared ``nonlocal`` inside a scope body."""

  def __init__(self) -> None:
    self.names: Set[str] = set()

  def visit_Nonlocal(self, node: cst.Nonlocal) -> None:
    self.names.update(item.name.value for item in node.names)


class _ScopeExtractor:
  """
  Walks one component or custom hook body and assembles its snapshot.
  """

  def __init__(
    self,
    frontend: PythonHooksFrontend,
    node: cst.FunctionDef,
    module_bindings: List[Binding],
    positions,
    filename: str,
  ):
    self.frontend = frontend
    self.node = node
    self.module_bindings = module_bindings
    self.positions = positions
    self.filename = filename
    self.scope_id = f"{filename}:{node.name.value}"
    self.bindings: Dict[str, Binding] = {}
    self.locals: Dict[str, _LocalDecl] = {}
    self._anonymous = 0

  def run(self) -> ScopeSnapshot:
    """
    Builds the snapshot.

    Returns:
        The scope's snapshot. Module bindings are shadowed by scope declarations.
    """
    for param in parameter_nodes(self.node.params):
      self._bind(param.name.value, DeclarationForm.PARAMETER)

    self._walk(_block_statements(self.node.body))

    nonlocals = _NonlocalDeclarations()
    self.node.body.visit(nonlocals)
    for name in nonlocals.names:
      if name in self.locals:
        self.locals[name].reassigned = True

    return ScopeSnapshot(
      id=self.scope_id,
      bindings=self._assemble_bindings(),
      closures=[self._assemble_closure(decl) for decl in self.locals.values()],
      source=self.filename,
    )

  # --- Assembly ---

  def _assemble_bindings(self) -> List[Binding]:
    merged: Dict[str, Binding] = {}
    for binding in self.module_bindings:
      if binding.name not in self.bindings and binding.name not in self.locals:
        merged[binding.name] = binding
    for name, binding in self.bindings.items():
      if name not in self.locals:
        merged[name] = binding
    return list(merged.values())

  def _assemble_closure(self, decl: _LocalDecl) -> Closure:
    known = set(self.locals) | set(self.bindings) | {b.name for b in self.module_bindings}
    resolved = []
    for name in decl.free:
      if name not in known and (name in BUILTIN_NAMES or self.frontend.is_vocabulary(name)):
        continue
      resolved.append(name)

    return Closure(
      name=decl.name,
      role=decl.role,
      free_names=list(dict.fromkeys(resolved)),
      declared_dependencies=decl.declared,
      reassigned=decl.reassigned or decl.definitions > 1,
      fresh_object=decl.fresh,
      location=f"{self.filename}:{decl.line}",
    )

  # --- Declarations ---

  def _bind(self, name: str, form: DeclarationForm) -> None:
    self.bindings[name] = Binding(name=name, declaration=form, declaring_scope_id=self.scope_id)

  def _declare(
    self,
    name: str,
    role: ClosureRole,
    free: List[str],
    node: cst.CSTNode,
    declared: Optional[List[str]] = None,
    fresh: bool = False,
  ) -> None:
    if name in self.bindings:
      # Rebinding a parameter or cell keeps its original classification.
      logger.debug("Scope '%s': '%s' rebinds a scope binding; keeping the binding", self.scope_id, name)
      return
    existing = self.locals.get(name)
    if existing is not None:
      existing.definitions += 1
      existing.free.extend(n for n in free if n not in existing.free)
      return
    self.locals[name] = _LocalDecl(
      name=name, role=role, free=list(free), declared=declared, line=self._line(node), fresh=fresh
    )

  def _anonymous_name(self, hook: str, node: cst.CSTNode) -> str:
    self._anonymous += 1
    return f"{hook}@{self._line(node)}#{self._anonymous}"

  def _line(self, node: cst.CSTNode) -> int:
    try:
      return self.positions[node].start.line
    except KeyError:
      return self.positions[self.node].start.line

  # --- Walking ---

  def _walk(self, statements: Sequence[cst.CSTNode]) -> None:
    for stmt in statements:
      if isinstance(stmt, cst.SimpleStatementLine):
        for small in stmt.body:
          self._small_statement(small, small)
      elif isinstance(stmt, cst.FunctionDef):
        self._function_def(stmt)
      elif isinstance(stmt, cst.ClassDef):
        self._declare(stmt.name.value, ClosureRole.FUNCTION, free_names(stmt.body), stmt)
      elif isinstance(stmt, cst.For):
        for name in _target_names(stmt.target):
          self._declare(name, ClosureRole.DERIVED, free_names(stmt.iter), stmt)
          if name in self.locals:
            # Loop variables take a new value every iteration.
            self.locals[name].reassigned = True
        for block in _child_blocks(stmt):
          self._walk(block)
      elif isinstance(stmt, (cst.If, cst.Try, cst.With, cst.While)):
        for block in _child_blocks(stmt):
          self._walk(block)

  def _small_statement(self, small: cst.BaseSmallStatement, line_node: cst.CSTNode) -> None:
    if isinstance(small, cst.Assign):
      targets = [t.target for t in small.targets]
      self._assignment(targets, small.value, line_node)
    elif isinstance(small, cst.AnnAssign) and small.value is not None:
      self._assignment([small.target], small.value, line_node)
    elif isinstance(small, cst.AugAssign):
      for name in _target_names(small.target):
        if name in self.locals:
          self.locals[name].definitions += 1
          self.locals[name].free.extend(free_names(small.value))
    elif isinstance(small, cst.Expr):
      self._expression_statement(small.value, line_node)

  def _assignment(self, targets: List[cst.BaseExpression], value: cst.BaseExpression, line_node: cst.CSTNode) -> None:
    kind = self.frontend.hook_kind(value)

    if kind == "state":
      for target in targets:
        names = _target_names(target)
        if isinstance(target, (cst.Tuple, cst.List)) and len(names) >= 2:
          self._bind(names[0], DeclarationForm.STATE_CELL)
          self._bind(names[1], DeclarationForm.STATE_SETTER)
        elif names:
          self._bind(names[0], DeclarationForm.STATE_CELL)
      return

    if kind == "custom":
      # Custom hooks may hold state of their own.
      for target in targets:
        for name in _target_names(target):
          self._bind(name, DeclarationForm.STATE_CELL)
      return

    if kind == "ref":
      for target in targets:
        for name in _target_names(target):
          self._bind(name, DeclarationForm.REFERENCE_CELL)
      return

    names = [n for t in targets for n in _target_names(t)]

    if kind == "memo":
      body, deps = self._hook_arguments(value)
      declared = None if deps is _OMITTED else deps
      for name in names:
        self._declare(name, ClosureRole.MEMOIZED, _body_names(body), line_node, declared)
      return

    if kind == "effect":
      self._effect_call(value, line_node)
      return

    role = ClosureRole.FUNCTION if isinstance(value, cst.Lambda) else ClosureRole.DERIVED
    fresh = isinstance(value, _FRESH_VALUES)
    for name in names:
      self._declare(name, role, free_names(value), line_node, fresh=fresh)

  def _expression_statement(self, value: cst.BaseExpression, line_node: cst.CSTNode) -> None:
    kind = self.frontend.hook_kind(value)
    if kind == "effect":
      self._effect_call(value, line_node)
    elif kind == "memo":
      body, deps = self._hook_arguments(value)
      name = self._anonymous_name(_leaf(value.func), line_node)
      declared = None if deps is _OMITTED else deps
      self._declare(name, ClosureRole.MEMOIZED, _body_names(body), line_node, declared)

  def _effect_call(self, call: cst.Call, line_node: cst.CSTNode) -> None:
    body, deps = self._hook_arguments(call)
    name = self._anonymous_name(_leaf(call.func), line_node)
    declared = None if deps is _OMITTED else deps
    self._declare(name, ClosureRole.EFFECT, _body_names(body), line_node, declared)

  def _function_def(self, node: cst.FunctionDef) -> None:
    role = ClosureRole.FUNCTION
    declared: Optional[List[str]] = None

    for decorator in node.decorators:
      expr = decorator.decorator
      kind = self.frontend.hook_kind(expr) if isinstance(expr, cst.Call) else self._bare_hook(expr)
      if kind in ("effect", "memo"):
        role = ClosureRole.EFFECT if kind == "effect" else ClosureRole.MEMOIZED
        deps = self._decorator_dependencies(expr) if isinstance(expr, cst.Call) else _OMITTED
        declared = None if deps is _OMITTED else deps
        break

    self._declare(node.name.value, role, free_names(node), node, declared)

  def _bare_hook(self, expr: cst.BaseExpression) -> Optional[str]:
    leaf = _leaf(expr)
    if leaf in self.frontend.config.effect_hooks:
      return "effect"
    if leaf in self.frontend.config.memo_hooks:
      return "memo"
    return None

  # --- Arguments ---

  def _hook_arguments(self, call: cst.Call) -> Tuple[Optional[cst.BaseExpression], object]:
    """
    Splits a memo/effect hook call into its body and dependency list.

    Returns:
        (body expression or None, list of dependency strings or _OMITTED).
    """
    positional = [a for a in call.args if a.keyword is None and not a.star]
    keywords = {a.keyword.value: a.value for a in call.args if a.keyword is not None}

    body = keywords.get("function", positional[0].value if positional else None)
    if "dependencies" in keywords:
      deps_node = keywords["dependencies"]
    elif len(positional) > 1:
      deps_node = positional[1].value
    else:
      deps_node = None
    return body, self._dependency_list(deps_node)

  def _decorator_dependencies(self, call: cst.Call) -> object:
    for arg in call.args:
      if arg.keyword is not None and arg.keyword.value == "dependencies":
        return self._dependency_list(arg.value)
    for arg in call.args:
      if arg.keyword is None and isinstance(arg.value, (cst.List, cst.Tuple)):
        return self._dependency_list(arg.value)
    return _OMITTED

  def _dependency_list(self, node: Optional[cst.BaseExpression]) -> object:
    if node is None or (isinstance(node, cst.Name) and node.value == "None"):
      return _OMITTED
    if isinstance(node, (cst.List, cst.Tuple, cst.Set)):
      return [capture_node_source(el.value).strip() for el in node.elements]
    logger.warning(
      "Scope '%s': dependency list '%s' is not a literal; treating it as omitted",
      self.scope_id,
      capture_node_source(node).strip(),
    )
    return _OMITTED


def _body_names(body: Optional[cst.BaseExpression]) -> List[str]:
  return free_names(body) if body is not None else []


def _leaf(expr: cst.BaseExpression) -> str:
  """Last segment of a dotted name (``reactpy.use_state`` -> ``use_state``)."""
  full = get_full_name(expr)
  return full.split(".")[-1] if full else ""


def _target_names(target: cst.BaseExpression) -> List[str]:
  """Names bound by an assignment target, ignoring attribute and subscript targets."""
  if isinstance(target, cst.Name):
    return [target.value]
  if isinstance(target, (cst.Tuple, cst.List)):
    names: List[str] = []
    for element in target.elements:
      names.extend(_target_names(element.value))
    return names
  if isinstance(target, cst.StarredElement):
    return _target_names(target.value)
  return []


def _block_statements(block: cst.BaseSuite) -> Sequence[cst.CSTNode]:
  if isinstance(block, cst.IndentedBlock):
    return block.body
  if isinstance(block, cst.SimpleStatementSuite):
    return [cst.SimpleStatementLine(body=block.body)]
  return []


def _child_blocks(stmt: cst.CSTNode) -> List[Sequence[cst.CSTNode]]:
  """Statement lists nested in a compound statement (bodies, else, handlers)."""
  blocks: List[Sequence[cst.CSTNode]] = []
  body = getattr(stmt, "body", None)
  if isinstance(body, cst.BaseSuite):
    blocks.append(_block_statements(body))

  orelse = getattr(stmt, "orelse", None)
  while orelse is not None:
    if isinstance(orelse, cst.If):
      blocks.append(_block_statements(orelse.body))
      orelse = orelse.orelse
    else:
      blocks.append(_block_statements(orelse.body))
      orelse = None

  for handler in getattr(stmt, "handlers", ()):
    blocks.append(_block_statements(handler.body))
  finalbody = getattr(stmt, "finalbody", None)
  if finalbody is not None:
    blocks.append(_block_statements(finalbody.body))
  return blocks
