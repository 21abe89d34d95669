"""Release orchestration for multi-package JavaScript workspaces."""

__version__ = "0.1.0"
