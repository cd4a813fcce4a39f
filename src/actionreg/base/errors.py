"""Exception hierarchy for actionreg.

Absence is never an error in the registry: lookups that find nothing
return ``None``. The exceptions below cover genuinely invalid input
(unknown action types, empty schema registrations) and broken
configuration files.

Failures raised by collaborators (plugin initializers, trace-store and
flow-state-store providers) are not wrapped. They propagate unchanged to
whoever awaited the construction.

.. seealso::
   :mod:`actionreg.registry.node` : Registry node raising these errors
   :mod:`actionreg.utils.config` : Configuration loading
"""


class FrameworkError(Exception):
    """Base exception for all actionreg errors."""

    pass


class RegistryError(FrameworkError):
    """Exception for registry-related errors.

    Raised when a registration is malformed, e.g. an action registered
    under a type outside the closed set of action types, or an action
    without a name.
    """

    pass


class SchemaDefinitionError(RegistryError):
    """Raised when a schema is registered with neither payload populated."""

    pass


class ConfigurationError(FrameworkError):
    """Exception for configuration-related errors.

    Raised when configuration files are invalid or contain values that
    cannot be interpreted (for example a non-integer reflection port).
    """

    pass
