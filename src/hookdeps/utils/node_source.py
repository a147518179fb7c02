"""
CST Node Rendering Helpers.

Utilities to turn LibCST nodes back into text "in vacuum", used by the Python
frontend to record dependency expressions (``ref.current``) exactly as written.
"""

from typing import Union

import libcst as cst

# A dummy module used as a context to render detached nodes.
_RENDER_CTX = cst.parse_module("")


def capture_node_source(node: cst.CSTNode) -> str:
  """
  Renders a LibCST node into its Python source code string representation.

  Args:
      node: The CST node to serialise.

  Returns:
      str: The Python code string.
  """
  return _RENDER_CTX.code_for_node(node)


def get_full_name(node: Union[cst.Name, cst.Attribute, cst.BaseExpression]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the identifier.

  Returns:
    str: The dotted name (e.g., "reactpy.use_state"), or an empty string if the
    node is not a Name/Attribute chain.

  Example:
    >>> get_full_name(cst.Attribute(value=cst.Name("reactpy"), attr=cst.Name("use_state")))
    'reactpy.use_state'
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    base = get_full_name(node.value)
    return f"{base}.{node.attr.value}" if base else ""
  return ""
