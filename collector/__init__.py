"""
Agromet Normalizer - Collector Module
Decoding of provider payloads into raw readings for the pipeline.
"""

from .tahmo_series import decode_response_text, decode_series

__all__ = ["decode_series", "decode_response_text"]
