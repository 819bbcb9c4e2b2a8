"""node-doctor exception hierarchy.

All public exceptions inherit from NodeDoctorError, giving callers a single
base class to catch when they want to handle any node-doctor failure
without swallowing unrelated errors.

Detection and assessment never raise these at runtime: a failing detector
or health check is logged and reduced to missing data. They surface only
from programming errors (invalid detector registration) and from user
input (a malformed configuration file).
"""


class NodeDoctorError(Exception):
    """Base exception for all node-doctor errors."""


class DetectorError(NodeDoctorError):
    """Raised when a detector cannot be registered.

    Covers missing names, unknown platform families, and duplicate
    registrations in a ``DetectorRegistry``.
    """


class ConfigError(NodeDoctorError):
    """Raised when a configuration file cannot be loaded.

    Covers unreadable files, YAML syntax errors, unknown keys, and values
    of the wrong type.
    """
