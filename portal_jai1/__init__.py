"""Portal JAI1 backend: client profiles with field-level encryption."""

__version__ = "1.0.0"
