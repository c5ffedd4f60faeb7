"""Command line tooling for mtreex."""
