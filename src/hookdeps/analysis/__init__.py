"""
Static Analysis Package.

The dependency analysis pipeline, leaves first:

Modules:
    - ``classifier``: Origin-kind classification of bindings.
    - ``capture_graph``: Integer-indexed reference graph of a scope.
    - ``reachability``: Fixpoint of reachable may-change bindings.
    - ``verifier``: Checks of declared dependency lists.
    - ``reporter``: Structured and tabular rendering of findings.
"""
