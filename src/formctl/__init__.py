"""formctl: form-definition state engine and schema generator."""

__version__ = "0.4.0"
