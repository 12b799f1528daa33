"""rebootmgr control plane: configuration, domain state and client/daemon protocol."""

__version__ = "0.1.0"
