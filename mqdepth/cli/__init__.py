"""
mqdepth command line interface.

This package wires configuration, the queue poller, and output rendering
into the ``mqdepth`` command.
"""

from .main import cli, main
from .poll_cli import PollCLI

__all__ = ["PollCLI", "main", "cli"]
