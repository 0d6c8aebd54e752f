"""Editing core: data model, registry, services and the editor session."""
