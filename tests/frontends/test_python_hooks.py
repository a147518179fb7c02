"""
Tests for the Python hooks frontend.

Verifies:
1. Recognition of components and custom hooks.
2. Classification of parameters, state cells, setters, reference cells and custom hook results.
3. Memoized computations and effects, in call and decorator form, with their dependency lists.
4. Module bindings and their reassignment status.
5. End-to-end diagnostics for the classic hook examples.
"""

import pytest

from hookdeps import check_source
from hookdeps.config import AnalyzerConfig
from hookdeps.enums import ClosureRole, DeclarationForm, FindingKind, Severity
from hookdeps.errors import InputError
from hookdeps.frontends.python_hooks import PythonHooksFrontend


def extract(code: str, config: AnalyzerConfig = None):
  return PythonHooksFrontend(config).extract(code, filename="app.py")


def single_scope(code: str, config: AnalyzerConfig = None):
  scopes = extract(code, config)
  assert len(scopes) == 1
  return scopes[0]


def bindings_of(scope):
  return {b.name: b for b in scope.bindings}


def closures_of(scope):
  return {c.name: c for c in scope.closures}


def findings(code: str, config: AnalyzerConfig = None):
  result = check_source(code, filename="app.py", config=config)
  return [(d.computation, d.kind, d.subject_name) for d in result.diagnostics]


# --- Scope recognition ---


def test_components_and_custom_hooks_are_scopes():
  code = """
import reactpy
from reactpy import component

def helper(x):
    return x

@component
def Counter():
    return None

@reactpy.component
def Other():
    return None

def use_toggle(initial):
    return initial

def use_state(value):
    return value
"""
  scopes = extract(code)
  assert [s.id for s in scopes] == ["app.py:Counter", "app.py:Other", "app.py:use_toggle"]
  assert all(s.source == "app.py" for s in scopes)


def test_syntax_error_is_input_error():
  with pytest.raises(InputError, match="app.py"):
    extract("def broken(:\n    pass\n")


def test_extract_missing_file(tmp_path):
  with pytest.raises(InputError, match="cannot read source"):
    PythonHooksFrontend().extract_file(tmp_path / "absent.py")


def test_extract_file(tmp_path):
  path = tmp_path / "widgets.py"
  path.write_text("def use_thing(value):\n    return value\n", encoding="utf-8")
  scopes = PythonHooksFrontend().extract_file(path)
  assert scopes[0].id == f"{path}:use_thing"
  assert scopes[0].source == str(path)


# --- Bindings ---


def test_scope_bindings():
  code = """
from reactpy import component, use_state, use_ref

@component
def Counter(step, *rest, label=None):
    count, set_count = use_state(0)
    total = use_state(0)
    box = reactpy.use_ref(None)
    toggled = use_toggle(False)
    step = step or 1
    return count
"""
  scope = single_scope(code)
  bindings = bindings_of(scope)

  assert bindings["step"].declaration == DeclarationForm.PARAMETER
  assert bindings["rest"].declaration == DeclarationForm.PARAMETER
  assert bindings["label"].declaration == DeclarationForm.PARAMETER
  assert bindings["count"].declaration == DeclarationForm.STATE_CELL
  assert bindings["set_count"].declaration == DeclarationForm.STATE_SETTER
  assert bindings["total"].declaration == DeclarationForm.STATE_CELL
  assert bindings["box"].declaration == DeclarationForm.REFERENCE_CELL
  assert bindings["toggled"].declaration == DeclarationForm.STATE_CELL
  assert bindings["count"].declaring_scope_id == "app.py:Counter"
  # Rebinding a parameter keeps it a parameter.
  assert "step" not in closures_of(scope)


def test_module_bindings_and_reassignment():
  code = """
from reactpy import component

LIMIT = 10
COUNTER = 0
COUNTER += 1
CACHE = {}

def reset():
    global CACHE
    CACHE = {}

def read_cache(key):
    return CACHE.get(key, LIMIT)

@component
def View():
    return None
"""
  bindings = bindings_of(single_scope(code))

  assert bindings["LIMIT"].declaration == DeclarationForm.MODULE
  assert not bindings["LIMIT"].reassigned
  assert bindings["COUNTER"].reassigned
  assert bindings["CACHE"].reassigned
  assert bindings["read_cache"].captures == ["CACHE", "LIMIT"]
  assert bindings["component"].declaration == DeclarationForm.MODULE


# --- Closures ---


def test_memoized_computation_and_location():
  code = """
from reactpy import component, use_memo

@component
def Counter(count):
    doubled = use_memo(lambda: count * 2, [count])
    return doubled
"""
  closure = closures_of(single_scope(code))["doubled"]

  assert closure.role == ClosureRole.MEMOIZED
  assert closure.free_names == ["count"]
  assert closure.declared_dependencies == ["count"]
  assert closure.location == "app.py:6"


@pytest.mark.parametrize(
  "call, expected",
  [
    ("use_memo(lambda: a + b)", None),
    ("use_memo(lambda: a + b, None)", None),
    ("use_memo(lambda: a + b, deps)", None),
    ("use_memo(lambda: a + b, (a, b))", ["a", "b"]),
    ("use_memo(lambda: a + b, dependencies=[a, b.value])", ["a", "b.value"]),
    ("use_memo(function=lambda: a + b, dependencies=[])", []),
  ],
)
def test_dependency_list_forms(call, expected):
  code = f"""
from reactpy import component, use_memo

@component
def View(a, b, deps):
    result = {call}
    return result
"""
  closure = closures_of(single_scope(code))["result"]
  assert closure.declared_dependencies == expected
  assert closure.free_names == ["a", "b"]


def test_effect_calls_get_generated_names():
  code = """
from reactpy import component, use_effect, use_state

@component
def Logger():
    value, set_value = use_state(0)
    use_effect(lambda: print(value), [value])
    use_effect(lambda: print("tick"))
    return value
"""
  effects = [c for c in single_scope(code).closures if c.role == ClosureRole.EFFECT]

  assert [c.name for c in effects] == ["use_effect@7#1", "use_effect@8#2"]
  assert effects[0].free_names == ["value"]
  assert effects[0].declared_dependencies == ["value"]
  assert effects[1].free_names == []
  assert effects[1].declared_dependencies is None


def test_decorated_effects_and_memos():
  code = """
from reactpy import component, use_effect, use_memo, use_ref

@component
def Tracker(value):
    last = use_ref(value)

    @use_effect
    def always():
        last.current = value

    @use_effect(dependencies=[value])
    def on_change():
        previous = last.current
        last.current = value
        return previous

    @use_memo([value])
    def squared():
        return value * value

    return squared
"""
  closures = closures_of(single_scope(code))

  assert closures["always"].role == ClosureRole.EFFECT
  assert closures["always"].declared_dependencies is None
  assert closures["on_change"].role == ClosureRole.EFFECT
  assert closures["on_change"].declared_dependencies == ["value"]
  assert closures["on_change"].free_names == ["last", "value"]
  assert closures["squared"].role == ClosureRole.MEMOIZED
  assert closures["squared"].declared_dependencies == ["value"]


def test_local_functions_and_derived_values():
  code = """
from reactpy import component

@component
def View(items, factor):
    def scale(x):
        return x * factor

    shout = lambda text: text.upper()
    total = sum(scale(i) for i in items)
    return total
"""
  closures = closures_of(single_scope(code))

  assert closures["scale"].role == ClosureRole.FUNCTION
  assert closures["scale"].free_names == ["factor"]
  assert closures["shout"].role == ClosureRole.FUNCTION
  assert closures["shout"].free_names == []
  assert closures["total"].role == ClosureRole.DERIVED
  # Builtins are dropped unless shadowed.
  assert closures["total"].free_names == ["items", "scale"]


def test_reassigned_locals():
  code = """
from reactpy import component

@component
def View(items):
    handler = lambda: None
    if items:
        handler = lambda: items

    counter = 0

    def bump():
        nonlocal counter
        counter += 1

    for item in items:
        pass

    return handler
"""
  closures = closures_of(single_scope(code))

  assert closures["handler"].reassigned
  assert closures["handler"].free_names == ["items"]
  assert closures["counter"].reassigned
  assert closures["item"].reassigned
  assert closures["item"].role == ClosureRole.DERIVED
  assert not closures["bump"].reassigned


def test_fresh_object_values():
  code = """
from reactpy import component

@component
def View(items):
    options = {"sort": True}
    handler = make_handler(5)
    first = items[0]
    for item in items:
        pass
    return options
"""
  closures = closures_of(single_scope(code))

  assert closures["options"].fresh_object
  assert closures["handler"].fresh_object
  assert not closures["first"].fresh_object
  assert not closures["item"].fresh_object


def test_custom_vocabulary():
  code = """
from mylib import view, use_cached

@view
def Panel(x):
    result = use_cached(lambda: x, [])
    return result
"""
  config = AnalyzerConfig(memo_hooks=["use_cached"], component_decorators=["view"], hook_prefix="")
  closure = closures_of(single_scope(code, config))["result"]
  assert closure.role == ClosureRole.MEMOIZED
  assert closure.declared_dependencies == []


# --- End to end ---

HOOKS_EXAMPLE = """
from reactpy import use_callback, use_effect, use_ref, use_state

OUTSIDE_VAL = 5


def use_hooks_example(arg):
    state, _ = use_state(5)
    ref = use_ref(5)

    def un_memoized():
        return 10

    def un_memoized_two():
        return 10 + state

    un_memoized_three = lambda: 10 + arg

    memoized = use_callback(lambda: 10 + state, [])
    memoized_two = use_callback(lambda: 10 + arg, [])
    memoized_three = use_callback(lambda: un_memoized() + OUTSIDE_VAL + ref.current, [])
    memoized_three_fail = use_callback(
        lambda: un_memoized() + OUTSIDE_VAL + ref.current,
        [un_memoized, OUTSIDE_VAL, ref.current],
    )
    memoized_four = use_callback(lambda: un_memoized(), [arg])
    memoized_five = use_callback(lambda: un_memoized_two(), [])
    memoized_six = use_callback(lambda: un_memoized_three(), [])

    def un_memoized_four():
        return 10 + state

    memoized_seven = use_callback(lambda: un_memoized_four(), [un_memoized_four])
    memoized_eight = use_callback(lambda: un_memoized_four())

    use_effect(lambda: print("No time is passing"), [])
    use_effect(lambda: print("Time is passing"))
    use_effect(lambda: print(f"state is {state}"), [state])

    def un_memoized_five():
        return 10

    use_effect(lambda: print(un_memoized_five()), [un_memoized_five])
    use_effect(lambda: print(f"state is {state}"), [])

    state_ref = use_ref(state)
    use_effect(lambda: print(state_ref.current), [])
    use_effect(lambda: print("state changed"), [state])

    @use_effect(dependencies=[state])
    def track():
        prev_state = state_ref.current
        if state - prev_state > 5:
            print("incremented")
        state_ref.current = state

    prev_state, set_prev_state = use_state(state)

    @use_effect(dependencies=[prev_state, state])
    def track_with_state():
        if state - prev_state > 5:
            print("incremented")
        set_prev_state(state)

    return memoized
"""


def test_hooks_example_end_to_end():
  result = findings(HOOKS_EXAMPLE)
  named = [f for f in result if not f[0].startswith("use_effect@")]
  effects = [f[1:] for f in result if f[0].startswith("use_effect@")]

  assert named == [
    ("memoized", FindingKind.MISSING_DEPENDENCY, "state"),
    ("memoized_two", FindingKind.MISSING_DEPENDENCY, "arg"),
    ("memoized_three_fail", FindingKind.UNNECESSARY_DEPENDENCY, "un_memoized"),
    ("memoized_three_fail", FindingKind.UNNECESSARY_DEPENDENCY, "OUTSIDE_VAL"),
    ("memoized_three_fail", FindingKind.UNNECESSARY_DEPENDENCY, "ref.current"),
    ("memoized_four", FindingKind.UNNECESSARY_DEPENDENCY, "arg"),
    ("memoized_five", FindingKind.MISSING_DEPENDENCY, "un_memoized_two"),
    ("memoized_six", FindingKind.MISSING_DEPENDENCY, "un_memoized_three"),
    ("memoized_seven", FindingKind.REDUNDANT_MEMOIZATION, "memoized_seven"),
    ("memoized_eight", FindingKind.NO_DEPENDENCY_LIST, "memoized_eight"),
  ]
  assert effects == [
    (FindingKind.UNSTABLE_EFFECT_DEPENDENCY, "un_memoized_five"),
    (FindingKind.MISSING_DEPENDENCY, "state"),
  ]


CONFUSING_EXAMPLE = """
from reactpy import use_callback, use_memo


def higher_order_func(arg):
    def un_memoized():
        return 10 + arg

    return un_memoized


mutated_val = 10


def mutate_later():
    global mutated_val
    mutated_val = 20


def impure_func(arg):
    return mutated_val + arg


def use_confusing_hooks_example():
    un_memoized = higher_order_func(5)

    memoized = use_callback(lambda: un_memoized(), [un_memoized])
    memoized_two = use_callback(lambda: un_memoized(), [])
    memoized_three = use_callback(higher_order_func(5), [higher_order_func])
    memoized_four = use_callback(lambda: higher_order_func(5)(), [higher_order_func])
    impure = use_memo(lambda: impure_func(1), [])

    return memoized, memoized_two, memoized_three, memoized_four, impure
"""


def test_confusing_example_end_to_end():
  result = findings(CONFUSING_EXAMPLE)

  assert result == [
    ("memoized", FindingKind.UNNECESSARY_DEPENDENCY, "un_memoized"),
    ("memoized", FindingKind.REDUNDANT_MEMOIZATION, "memoized"),
    ("memoized_three", FindingKind.UNNECESSARY_DEPENDENCY, "higher_order_func"),
    ("memoized_four", FindingKind.UNNECESSARY_DEPENDENCY, "higher_order_func"),
    ("impure", FindingKind.UNTRACKED_EXTERNAL_MUTATION, "mutated_val"),
  ]


def test_inline_and_called_memo_arguments_are_classified_alike():
  scope = single_scope(CONFUSING_EXAMPLE)
  closures = closures_of(scope)
  assert closures["memoized_three"].free_names == closures["memoized_four"].free_names == ["higher_order_func"]


def test_external_mutation_severity_from_config():
  config = AnalyzerConfig(external_mutation_severity="error")
  result = check_source(CONFUSING_EXAMPLE, config=config)
  untracked = [d for d in result.diagnostics if d.kind == FindingKind.UNTRACKED_EXTERNAL_MUTATION]

  assert [d.severity for d in untracked] == [Severity.ERROR]
  assert "through 'impure_func'" in untracked[0].rationale
  assert result.has_errors
