"""Impact fraction to colour mapping."""

from __future__ import annotations

from matplotlib import colormaps
from matplotlib.colors import Normalize

# ColorBrewer Spectral: red for 0.0 (hottest) through to blue for 1.0 (coldest)
GRADIENT_NAME = "Spectral"


def fraction_to_rgb(fraction: float, gradient: str = GRADIENT_NAME) -> tuple[int, int, int]:
    """Map a fraction in [0, 1] to an (r, g, b) triple with 0-255 channels.

    Values outside the domain are clamped to its ends.
    """
    cmap = colormaps[gradient]
    norm = Normalize(vmin=0.0, vmax=1.0, clip=True)
    r, g, b, _ = cmap(float(norm(fraction)))
    return (round(r * 255), round(g * 255), round(b * 255))


def css_rgb(rgb: tuple[int, int, int]) -> str:
    return "rgb({}, {}, {})".format(*rgb)
