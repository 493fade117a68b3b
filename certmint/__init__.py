"""
CertMint — Certificate issuance and lifecycle registry.
"""

__version__ = "0.1.0"
