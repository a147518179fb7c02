"""
Free Identifier Collection.

Computes the free names of a function, lambda, comprehension or expression:
the identifiers it reads that are not bound inside it. Nested functions,
lambdas and comprehensions are analysed recursively and contribute their own
free names to the enclosing result.

The analysis follows Python's function-level scoping and is flow-insensitive:
a name assigned anywhere in a body is local to that body, unless declared
``global`` or ``nonlocal``.
"""

import builtins
from typing import List, Set, Union

import libcst as cst

BUILTIN_NAMES = frozenset(dir(builtins))

_Comprehension = (cst.ListComp, cst.SetComp, cst.GeneratorExp, cst.DictComp)


def parameter_nodes(params: cst.Parameters) -> List[cst.Param]:
  """
  Flattens every parameter of a signature.

  Args:
      params: The Parameters node of a function or lambda.

  Returns:
      Positional-only, regular, star, keyword-only and double-star parameters, in order.
  """
  nodes: List[cst.Param] = list(params.posonly_params) + list(params.params)
  if isinstance(params.star_arg, cst.Param):
    nodes.append(params.star_arg)
  nodes.extend(params.kwonly_params)
  if params.star_kwarg is not None:
    nodes.append(params.star_kwarg)
  return nodes


class _FreeNameCollector(cst.CSTVisitor):
  """
  Collects loads and stores at one scope level.

  Attributes:
      loads (List[str]): Names read, in source order (may repeat).
      stores (Set[str]): Names bound at this level.
      outer (Set[str]): Names declared ``global`` or ``nonlocal``.
  """

  def __init__(self) -> None:
    self.loads: List[str] = []
    self.stores: Set[str] = set()
    self.outer: Set[str] = set()

  # --- Stores ---

  def store(self, target: cst.BaseExpression) -> None:
    """
    Records the names bound by an assignment target.
    Attribute and subscript targets read their base object.
    """
    if isinstance(target, cst.Name):
      self.stores.add(target.value)
    elif isinstance(target, (cst.Tuple, cst.List)):
      for element in target.elements:
        self.store(element.value)
    elif isinstance(target, cst.StarredElement):
      self.store(target.value)
    else:
      target.visit(self)

  def visit_AssignTarget(self, node: cst.AssignTarget) -> bool:
    self.store(node.target)
    return False

  def visit_AnnAssign(self, node: cst.AnnAssign) -> bool:
    self.store(node.target)
    if node.value is not None:
      node.value.visit(self)
    return False

  def visit_AugAssign(self, node: cst.AugAssign) -> bool:
    if isinstance(node.target, cst.Name):
      self.loads.append(node.target.value)
    self.store(node.target)
    node.value.visit(self)
    return False

  def visit_NamedExpr(self, node: cst.NamedExpr) -> bool:
    self.store(node.target)
    node.value.visit(self)
    return False

  def visit_For(self, node: cst.For) -> bool:
    self.store(node.target)
    node.iter.visit(self)
    node.body.visit(self)
    if node.orelse:
      node.orelse.visit(self)
    return False

  def visit_CompFor(self, node: cst.CompFor) -> bool:
    self.store(node.target)
    node.iter.visit(self)
    for cond in node.ifs:
      cond.visit(self)
    if node.inner_for_in:
      node.inner_for_in.visit(self)
    return False

  def visit_WithItem(self, node: cst.WithItem) -> bool:
    node.item.visit(self)
    if node.asname is not None:
      self.store(node.asname.name)
    return False

  def visit_ExceptHandler(self, node: cst.ExceptHandler) -> bool:
    if node.type is not None:
      node.type.visit(self)
    if node.name is not None:
      self.store(node.name.name)
    node.body.visit(self)
    return False

  def visit_Import(self, node: cst.Import) -> bool:
    for alias in node.names:
      if alias.asname:
        self.store(alias.asname.name)
      else:
        root = alias.name
        while isinstance(root, cst.Attribute):
          root = root.value
        self.store(root)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    if isinstance(node.names, cst.ImportStar):
      return False
    for alias in node.names:
      self.store(alias.asname.name if alias.asname else alias.name)
    return False

  def visit_Global(self, node: cst.Global) -> bool:
    self.outer.update(item.name.value for item in node.names)
    return False

  def visit_Nonlocal(self, node: cst.Nonlocal) -> bool:
    self.outer.update(item.name.value for item in node.names)
    return False

  # --- Loads ---

  def visit_Name(self, node: cst.Name) -> None:
    self.loads.append(node.value)

  def visit_Attribute(self, node: cst.Attribute) -> bool:
    node.value.visit(self)
    return False

  def visit_Arg(self, node: cst.Arg) -> bool:
    node.value.visit(self)
    return False

  # --- Nested scopes ---

  def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
    for decorator in node.decorators:
      decorator.decorator.visit(self)
    for param in parameter_nodes(node.params):
      if param.default is not None:
        param.default.visit(self)
    self.stores.add(node.name.value)
    self.loads.extend(free_names(node))
    return False

  def visit_ClassDef(self, node: cst.ClassDef) -> bool:
    for base in node.bases:
      base.value.visit(self)
    self.stores.add(node.name.value)
    nested = _FreeNameCollector()
    node.body.visit(nested)
    self.loads.extend(nested.result())
    return False

  def visit_Lambda(self, node: cst.Lambda) -> bool:
    for param in parameter_nodes(node.params):
      if param.default is not None:
        param.default.visit(self)
    self.loads.extend(free_names(node))
    return False

  def visit_ListComp(self, node: cst.ListComp) -> bool:
    self.loads.extend(free_names(node))
    return False

  def visit_SetComp(self, node: cst.SetComp) -> bool:
    self.loads.extend(free_names(node))
    return False

  def visit_GeneratorExp(self, node: cst.GeneratorExp) -> bool:
    self.loads.extend(free_names(node))
    return False

  def visit_DictComp(self, node: cst.DictComp) -> bool:
    self.loads.extend(free_names(node))
    return False

  def result(self) -> List[str]:
    """Ordered unique free names of this level."""
    free = (n for n in self.loads if n not in self.stores or n in self.outer)
    return list(dict.fromkeys(free))


def free_names(node: Union[cst.CSTNode, cst.BaseExpression]) -> List[str]:
  """
  Returns the free identifiers of a node, in first-use order.

  Builtins are included; callers decide whether a builtin is shadowed.

  Args:
      node: A FunctionDef, Lambda, comprehension or any expression.

  Returns:
      Unique names read by the node but not bound inside it.
  """
  collector = _FreeNameCollector()

  if isinstance(node, (cst.FunctionDef, cst.Lambda)):
    for param in parameter_nodes(node.params):
      collector.stores.add(param.name.value)
    node.body.visit(collector)
  elif isinstance(node, _Comprehension):
    node.for_in.visit(collector)
    if isinstance(node, cst.DictComp):
      node.key.visit(collector)
      node.value.visit(collector)
    else:
      node.elt.visit(collector)
  else:
    node.visit(collector)

  return collector.result()
