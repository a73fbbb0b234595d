"""Two-matching and strengthened comb separation for capacitated vehicle routing, with an ALNS driver."""

__version__ = "0.1.0"