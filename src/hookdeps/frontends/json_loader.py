"""
JSON Scope Document Loader.

Reads a reference-resolved scope document and validates it against the
`AnalysisInput` schema::

    {
      "scopes": [
        {
          "id": "Counter",
          "bindings": [{"name": "count", "declaration": "state_cell"}],
          "closures": [
            {"name": "label", "role": "memoized", "free_names": ["count"],
             "declared_dependencies": []}
          ]
        }
      ]
    }
"""

import json
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from hookdeps.core.model import AnalysisInput, ScopeSnapshot
from hookdeps.errors import InputError


def parse_document(text: str, origin: str = "<string>") -> List[ScopeSnapshot]:
  """
  Parses and validates a JSON scope document.

  A bare list of scopes is accepted as well as the ``{"scopes": [...]}`` form.

  Args:
      text: JSON text.
      origin: Name used in error messages.

  Returns:
      The validated scope snapshots.

  Raises:
      InputError: If the text is not JSON or does not match the schema.
  """
  try:
    data = json.loads(text)
  except json.JSONDecodeError as e:
    raise InputError(f"{origin}: invalid JSON ({e})") from e

  if isinstance(data, list):
    data = {"scopes": data}

  try:
    document = AnalysisInput.model_validate(data)
  except ValidationError as e:
    raise InputError(f"{origin}: document does not match the scope schema:\n{e}") from e

  return document.scopes


def load_document(source: Union[str, Path]) -> List[ScopeSnapshot]:
  """
  Loads a scope document from disk.

  Args:
      source: Path to the JSON file.

  Returns:
      The validated scope snapshots.

  Raises:
      InputError: If the file cannot be read or parsed.
  """
  path = Path(source)
  try:
    text = path.read_text("utf-8")
  except OSError as e:
    raise InputError(f"{path}: cannot read document ({e})") from e
  return parse_document(text, origin=str(path))
