"""JSON Schema draft 2020-12: schema model, JSON encoding, resolution and validation."""

__version__ = "0.1.0"