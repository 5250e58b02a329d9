"""KEEL Sea Service engine: draft lifecycle and completion rules for cadet Training Record Books."""

__version__ = "0.1.0"
