from __future__ import annotations

from .content import extract_hosts, extract_protocol, parse_content
from .filename import parse_filename

__all__ = [
    "extract_hosts",
    "extract_protocol",
    "parse_content",
    "parse_filename",
]
