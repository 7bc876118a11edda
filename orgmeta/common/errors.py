"""Exception hierarchy shared across orgmeta.

Configuration errors are fatal and raised before storage is touched.
Per-document indexing faults are not represented here; the orchestrator
catches them, logs them and keeps going.
"""


class OrgMetaError(Exception):
    """Base class for orgmeta errors."""


class ConfigurationError(OrgMetaError):
    """Invalid setup or query description. Aborts the call."""


class StorageConfigError(ConfigurationError):
    """Storage location is unset or does not exist."""


class FilterError(ConfigurationError):
    """Filter expression has an unknown shape or an unusable operand."""


class RegistryFormatError(ConfigurationError):
    """ID registry file could not be parsed."""
