"""wsauth — passwordless email sign-in for multi-tenant workspaces."""

__version__ = "0.1.0"
