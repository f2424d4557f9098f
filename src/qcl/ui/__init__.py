"""Command-line inspection tools for qcl configs."""
