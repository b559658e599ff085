"""Provider-scoped role hierarchy and privilege guard for conferencing admins."""

__version__ = "0.1.0"
