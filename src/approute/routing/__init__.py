"""Routing: compiled route templates, matching, and typed route shapes.

Templates are compiled once per distinct string into an immutable
pattern; route shapes pair a compiled template with typed field
descriptors and are built once at definition time.
"""
