"""
Command Handlers Package.

Each module implements one CLI subcommand. Handlers return integer exit codes
and never raise for analysis findings.
"""
