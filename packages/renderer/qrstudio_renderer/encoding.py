"""Module matrix encoding backed by the qrcode library."""

from __future__ import annotations

import numpy as np
import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def encode_modules(data: str, error_correction: str = "M") -> np.ndarray | None:
    """Return the boolean module grid for ``data``, or None when there is nothing to encode.

    True marks a dark module. The grid carries no quiet zone; layout adds margins.
    """
    if not data:
        return None
    level = ERROR_CORRECTION_LEVELS.get(error_correction.upper(), ERROR_CORRECT_M)
    qr = qrcode.QRCode(version=None, error_correction=level, box_size=1, border=0)
    qr.add_data(data)
    qr.make(fit=True)
    return np.array(qr.get_matrix(), dtype=bool)
