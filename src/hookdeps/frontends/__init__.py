"""
Frontends producing scope snapshots.

Modules:
    - ``json_loader``: Reference-resolved JSON scope documents.
    - ``python_hooks``: Python source in the hooks idiom (LibCST).
    - ``free_names``: Free identifier collection used by the Python frontend.
"""
