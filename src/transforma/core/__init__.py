"""Workflow schemas and configuration loading."""
