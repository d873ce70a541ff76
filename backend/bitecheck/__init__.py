"""
BiteCheck: packaged-food lookup by barcode and a deterministic 0-100 health score.
"""
__version__ = "1.0.0"
