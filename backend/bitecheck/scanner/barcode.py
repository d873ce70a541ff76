"""
Retail barcode validation (EAN-8, UPC-A, EAN-13) with the GS1 modulus-10 check digit.
"""
VALID_LENGTHS = (8, 12, 13)


def gs1_check_digit(body: str) -> int:
    """
    Check digit for the digits before it. EAN-8 and UPC-A weight 3,1,3,... from the left;
    EAN-13 weights 1,3,1,... (both are 3 on the digit next to the check digit).
    """
    total_len = len(body) + 1
    total = 0
    for i, ch in enumerate(body):
        digit = int(ch)
        if total_len in (8, 12):
            total += digit * (3 if i % 2 == 0 else 1)
        else:
            total += digit * (1 if i % 2 == 0 else 3)
    return (10 - total % 10) % 10


def is_valid_barcode(code: object) -> bool:
    if not isinstance(code, str) or not code.isascii() or not code.isdigit():
        return False
    if len(code) not in VALID_LENGTHS:
        return False
    return gs1_check_digit(code[:-1]) == int(code[-1])
