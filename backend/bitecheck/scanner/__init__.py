"""
Barcode validation and multi-round consensus over noisy camera reads.
"""
from .barcode import gs1_check_digit, is_valid_barcode
from .consensus import ConsensusScanner, ScanSession, ScanState, ScanVote, round_winner

__all__ = [
    "gs1_check_digit",
    "is_valid_barcode",
    "ConsensusScanner",
    "ScanSession",
    "ScanState",
    "ScanVote",
    "round_winner",
]
