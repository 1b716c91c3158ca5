"""An interactive shell with pipes, redirections, expansion and builtins."""

__version__ = "0.1.0"