"""formwork - declarative HTML form building and server-side validation."""

__version__ = "0.1.0"
