"""
Core Package.

Contains the boundary data model (scope snapshots, diagnostics) and the
`AnalysisEngine` that drives the analysis pipeline.
"""
