"""Command line interface for marksearch.

Built with Click and Rich.
"""

from marksearch.cli.main import cli

__all__ = ["cli"]
