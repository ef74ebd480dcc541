"""Command handlers behind the ``nextforge`` CLI.

Every handler takes a :class:`~nextforge.config.Session` first and raises a
:class:`~nextforge.errors.ForgeError` subclass on hard failures.
"""

from nextforge.commands.add_module import add_module
from nextforge.commands.add_node import add_node
from nextforge.commands.cleanup import cleanup_app
from nextforge.commands.create_app import CreateAppOptions, create_app
from nextforge.commands.taurify import taurify_app
from nextforge.commands.verify_cmd import verify_entity
from nextforge.commands.workdir import set_working_directory

__all__ = [
    "CreateAppOptions",
    "add_module",
    "add_node",
    "cleanup_app",
    "create_app",
    "set_working_directory",
    "taurify_app",
    "verify_entity",
]
