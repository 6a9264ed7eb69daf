"""
LexCerta - Legal Citation and Quote Verification

Checks legal citations and quoted passages against the CourtListener
case-law database so fabricated ("hallucinated") references are caught
before they reach a brief.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
