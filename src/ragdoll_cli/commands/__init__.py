"""Sub-command groups for the Ragdoll CLI."""
