"""
Delta E — CIEDE2000 perceptual color difference.

Follows Sharma, Wu & Dalal, "The CIEDE2000 Color-Difference Formula:
Implementation Notes, Supplementary Test Data, and Mathematical Observations"
(2005). Inputs are assumed to be finite Lab triples; no validation is done.
"""
from __future__ import annotations

import math

from .color_space import hex_to_lab

Lab = tuple[float, float, float]

POW7_25 = 25.0 ** 7


def _hue_deg(b: float, a_prime: float) -> float:
    """Hue angle in [0, 360). Defined as 0 when a' = b = 0."""
    if a_prime == 0 and b == 0:
        return 0.0
    h = math.degrees(math.atan2(b, a_prime))
    return h + 360.0 if h < 0 else h


def delta_e_ciede2000(
    lab1: Lab,
    lab2: Lab,
    k_l: float = 1.0,
    k_c: float = 1.0,
    k_h: float = 1.0,
) -> float:
    L1, a1, b1 = lab1
    L2, a2, b2 = lab2

    # Chroma compensation (G factor) applied to a*
    C1 = math.hypot(a1, b1)
    C2 = math.hypot(a2, b2)
    C_bar_7 = ((C1 + C2) / 2) ** 7
    G = 0.5 * (1 - math.sqrt(C_bar_7 / (C_bar_7 + POW7_25)))

    a1_p = (1 + G) * a1
    a2_p = (1 + G) * a2
    C1_p = math.hypot(a1_p, b1)
    C2_p = math.hypot(a2_p, b2)
    h1_p = _hue_deg(b1, a1_p)
    h2_p = _hue_deg(b2, a2_p)

    # Differences
    dL_p = L2 - L1
    dC_p = C2_p - C1_p

    chroma_product = C1_p * C2_p
    if chroma_product == 0:
        dh_p = 0.0
    else:
        dh_p = h2_p - h1_p
        if dh_p > 180:
            dh_p -= 360
        elif dh_p < -180:
            dh_p += 360
    dH_p = 2 * math.sqrt(chroma_product) * math.sin(math.radians(dh_p) / 2)

    # Means
    L_bar_p = (L1 + L2) / 2
    C_bar_p = (C1_p + C2_p) / 2

    if chroma_product == 0:
        # Hue undefined for a neutral color: use the sum, not the mean
        h_bar_p = h1_p + h2_p
    elif abs(h1_p - h2_p) <= 180:
        h_bar_p = (h1_p + h2_p) / 2
    elif h1_p + h2_p < 360:
        h_bar_p = (h1_p + h2_p + 360) / 2
    else:
        h_bar_p = (h1_p + h2_p - 360) / 2

    # Weighting functions
    T = (
        1
        - 0.17 * math.cos(math.radians(h_bar_p - 30))
        + 0.24 * math.cos(math.radians(2 * h_bar_p))
        + 0.32 * math.cos(math.radians(3 * h_bar_p + 6))
        - 0.20 * math.cos(math.radians(4 * h_bar_p - 63))
    )
    L_offset_sq = (L_bar_p - 50) ** 2
    S_L = 1 + (0.015 * L_offset_sq) / math.sqrt(20 + L_offset_sq)
    S_C = 1 + 0.045 * C_bar_p
    S_H = 1 + 0.015 * C_bar_p * T

    # Hue rotation term for the blue region
    d_theta = 30 * math.exp(-(((h_bar_p - 275) / 25) ** 2))
    C_bar_p_7 = C_bar_p ** 7
    R_C = 2 * math.sqrt(C_bar_p_7 / (C_bar_p_7 + POW7_25))
    R_T = -math.sin(math.radians(2 * d_theta)) * R_C

    l_term = dL_p / (k_l * S_L)
    c_term = dC_p / (k_c * S_C)
    h_term = dH_p / (k_h * S_H)

    return math.sqrt(l_term ** 2 + c_term ** 2 + h_term ** 2 + R_T * c_term * h_term)


def color_distance(hex1: str, hex2: str) -> float:
    """CIEDE2000 distance between two hex colors."""
    return delta_e_ciede2000(hex_to_lab(hex1), hex_to_lab(hex2))
