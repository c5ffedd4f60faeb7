"""Helpers shared by the mtreex CLI commands."""
