"""
Runtime Configuration Store.

Analyzer policy (severity of untracked external mutations, redundant memoization,
strictness) and the hook vocabulary recognised by the Python frontend. Values are
read from ``[tool.hookdeps]`` in the nearest ``pyproject.toml`` and overridden by
explicit (CLI) arguments.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from hookdeps.enums import Severity

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

logger = logging.getLogger(__name__)


class AnalyzerConfig(BaseModel):
  """
  Global configuration container for the analyzer and its frontends.
  """

  external_mutation_severity: Severity = Field(
    Severity.INFO,
    description="Severity of UntrackedExternalMutation findings (info, warning or error).",
  )
  flag_redundant_memoization: bool = Field(True, description="Report memoizations whose key changes every time.")
  strict: bool = Field(False, description="If True, warnings also cause a failing exit code.")

  # Python hooks frontend vocabulary
  state_hooks: List[str] = Field(default_factory=lambda: ["use_state", "use_reducer"])
  ref_hooks: List[str] = Field(default_factory=lambda: ["use_ref"])
  memo_hooks: List[str] = Field(default_factory=lambda: ["use_memo", "use_callback"])
  effect_hooks: List[str] = Field(default_factory=lambda: ["use_effect", "use_layout_effect"])
  component_decorators: List[str] = Field(default_factory=lambda: ["component"])
  hook_prefix: str = Field("use_", description="Functions with this prefix are treated as custom hooks.")

  @field_validator("external_mutation_severity", mode="before")
  @classmethod
  def validate_severity(cls, v: Any) -> Any:
    """
    Normalizes and validates the severity name.

    Args:
        v: Raw value (string or Severity).

    Returns:
        The normalized value.

    Raises:
        ValueError: If the name is not a known severity.
    """
    if isinstance(v, Severity):
      return v
    v_clean = str(v).lower().strip()
    known = [s.value for s in Severity]
    if v_clean not in known:
      raise ValueError(f"Unknown severity: '{v_clean}'. Supported severities: {known}")
    return v_clean

  @field_validator("state_hooks", "ref_hooks", "memo_hooks", "effect_hooks", "component_decorators", mode="before")
  @classmethod
  def split_names(cls, v: Any) -> Any:
    """Accepts a comma separated string where a list of names is expected."""
    if isinstance(v, str):
      return [part.strip() for part in v.split(",") if part.strip()]
    return v

  @classmethod
  def load(
    cls,
    external_mutation_severity: Optional[str] = None,
    flag_redundant_memoization: Optional[bool] = None,
    strict: Optional[bool] = None,
    overrides: Optional[Dict[str, Any]] = None,
    search_path: Optional[Path] = None,
  ) -> "AnalyzerConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        external_mutation_severity: Override for the external mutation policy.
        flag_redundant_memoization: Override for redundant memoization reporting.
        strict: Override for strict mode.
        overrides: Additional ``key=value`` settings (from ``--config``).
        search_path: Directory to start searching for TOML config.

    Returns:
        AnalyzerConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)
    if toml_dir:
      logger.debug("Loaded [tool.hookdeps] from %s", toml_dir / "pyproject.toml")

    data: Dict[str, Any] = {**toml_config, **(overrides or {})}

    if external_mutation_severity is not None:
      data["external_mutation_severity"] = external_mutation_severity
    if flag_redundant_memoization is not None:
      data["flag_redundant_memoization"] = flag_redundant_memoization
    if strict is not None:
      data["strict"] = strict

    return cls(**data)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", toml_path, e)
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("hookdeps", {}), parent

  return {}, None


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses a list of 'key=value' strings into a dictionary.

  Types are inferred (bool, int, comma separated list, or string).

  Args:
      items (Optional[List[str]]): List of raw CLI strings directly from argparse.

  Returns:
      Dict[str, Any]: Parsed dictionary.
  """
  if not items:
    return {}

  config: Dict[str, Any] = {}
  for item in items:
    if "=" not in item:
      logger.warning("Ignoring invalid config format: '%s'. Expected 'key=value'.", item)
      continue

    key, val_str = item.split("=", 1)
    key = key.strip()
    val_str = val_str.strip()

    final_val: Any = val_str

    if val_str.lower() == "true":
      final_val = True
    elif val_str.lower() == "false":
      final_val = False
    elif "," in val_str:
      final_val = [part.strip() for part in val_str.split(",") if part.strip()]
    else:
      try:
        final_val = int(val_str)
      except ValueError:
        pass

    config[key] = final_val

  return config
