"""CPF (Brazilian individual taxpayer number) normalization and check digits."""

import re

CPF_LENGTH = 11

_NON_DIGITS = re.compile(r"\D")


def remove_cpf_punctuation(value: str) -> str:
    """Strip dots, dashes and any other non-digit characters."""

    return _NON_DIGITS.sub("", value)


def _check_digit(digits: str, first_weight: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(first_weight, 1, -1)))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_cpf(value: object) -> bool:
    """Return True when `value` is a well-formed CPF with matching check digits.

    Punctuation is ignored. Anything that is not a string, does not hold
    exactly eleven digits, or repeats a single digit is invalid.
    """

    if not isinstance(value, str):
        return False
    digits = remove_cpf_punctuation(value)
    if len(digits) != CPF_LENGTH or len(set(digits)) == 1:
        return False
    first = _check_digit(digits[:9], 10)
    second = _check_digit(digits[:10], 11)
    return digits[9] == str(first) and digits[10] == str(second)
