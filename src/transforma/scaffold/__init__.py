"""Workflow scaffolding and code templates."""
