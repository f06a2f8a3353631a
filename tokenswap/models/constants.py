"""Catalog constants: default pair preferences, sample amounts and the built-in
fallback catalog used when the live price feed cannot be reached.
"""

from typing import Dict, List, Tuple

FROM_PREFERENCES: Tuple[str, ...] = ("ETH", "ATOM")
TO_PREFERENCES: Tuple[str, ...] = ("USDC", "USD")

SAMPLE_AMOUNTS: Dict[str, str] = {
    "ETH": "1",
    "ATOM": "10",
    "USDC": "100",
}
DEFAULT_SAMPLE_AMOUNT = "1"

# Hand-checked quotes; order is kept as-is (not re-sorted) when served.
FALLBACK_PRICES: List[Tuple[str, str]] = [
    ("ETH", "1645.93"),
    ("USDC", "0.989832"),
    ("USD", "1"),
    ("ATOM", "7.186657"),
    ("BLUR", "0.208115"),
]

SIDES: Tuple[str, str] = ("from", "to")
