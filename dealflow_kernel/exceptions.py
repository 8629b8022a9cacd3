"""
Typed exception hierarchy for the dealflow packages.

Record content never raises: missing or malformed fields on deals,
proformas and tasks degrade to zero, a default or ``None``. The exceptions
below cover the remaining failure classes, which are programming and
configuration errors.

    DealflowError (base)
    |
    +-- RecordError
    |   +-- RecordTypeError
    |
    +-- ConfigurationError
    |   +-- ConfigNotFoundError
    |   +-- InvalidConfigError
    |
    +-- SigmaTableError

Every class carries a class-level ``code`` (machine-readable) and stores
its context as instance attributes, which ``StructuredFormatter`` lifts
into ``exc_*`` log fields.

Category        | Code                 | When Raised
----------------|----------------------|------------------------------------------
Record          | RECORD_TYPE_ERROR    | Engine input is neither the record type nor a mapping
----------------|----------------------|------------------------------------------
Configuration   | CONFIG_NOT_FOUND     | No YAML set with the requested name
                | INVALID_CONFIG       | Malformed YAML, missing key, bad value
----------------|----------------------|------------------------------------------
Sigma           | INVALID_SIGMA_TABLE  | Conversion table not ordered / too short
"""


class DealflowError(Exception):
    """
    Base exception for all dealflow errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "DEALFLOW_ERROR"


# Record-related exceptions


class RecordError(DealflowError):
    """Base exception for record-related errors."""

    code: str = "RECORD_ERROR"


class RecordTypeError(RecordError):
    """An engine input item is neither the expected record type nor a mapping."""

    code: str = "RECORD_TYPE_ERROR"

    def __init__(self, record_type: str, received_type: str):
        self.record_type = record_type
        self.received_type = received_type
        super().__init__(
            f"Expected {record_type} or a mapping, got {received_type}"
        )


# Configuration exceptions


class ConfigurationError(DealflowError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigNotFoundError(ConfigurationError):
    """No configuration set exists with the requested name."""

    code: str = "CONFIG_NOT_FOUND"

    def __init__(self, config_name: str, config_dir: str):
        self.config_name = config_name
        self.config_dir = config_dir
        super().__init__(
            f"Configuration set '{config_name}' not found in {config_dir}"
        )


class InvalidConfigError(ConfigurationError):
    """Configuration set could not be parsed or failed validation."""

    code: str = "INVALID_CONFIG"

    def __init__(self, config_name: str, reason: str):
        self.config_name = config_name
        self.reason = reason
        super().__init__(f"Invalid configuration '{config_name}': {reason}")


# Sigma conversion exceptions


class SigmaTableError(DealflowError):
    """DPMO-to-sigma table is not usable for interpolation."""

    code: str = "INVALID_SIGMA_TABLE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid sigma table: {reason}")
