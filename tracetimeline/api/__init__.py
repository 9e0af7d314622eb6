"""
API package - Payload access at the system boundary.
"""

from .loader import decode_response, fetch_payload

__all__ = [
    'decode_response',
    'fetch_payload',
]
