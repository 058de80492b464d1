"""Exceptions raised by vaultlinks.

The transform passes themselves never raise on bad content; these cover the
surfaces around them (configuration files, content directories).
"""


class VaultLinksError(Exception):
    """Base class for all vaultlinks errors."""


class ConfigError(VaultLinksError):
    """Invalid or unreadable pipeline configuration."""


class CorpusError(VaultLinksError):
    """Content directory missing or unreadable."""
