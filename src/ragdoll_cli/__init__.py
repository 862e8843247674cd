"""Ragdoll CLI - command-line client for a Ragdoll document and retrieval store."""

__version__ = "0.1.0"
