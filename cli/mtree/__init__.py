"""Typer entrypoint for the ``mtreex`` command."""

from .main import app, main

__all__ = ["app", "main"]
