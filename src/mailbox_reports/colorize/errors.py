# src/mailbox_reports/colorize/errors.py


class ConfigurationError(ValueError):
    """
    Raised when a colour rule cannot be applied as configured:
    - the filter does not reference the target column
    - the filter does not parse
    - the colour is not a usable CSS colour
    - the filter compares a number with a string
    """


class ColumnNotFoundError(LookupError):
    """Target column could not be resolved against the table header."""
