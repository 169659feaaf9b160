"""Utility helpers."""
from .network import client_identifier, first_forwarded_address  # noqa: F401
from .text import strip_code_fences  # noqa: F401
