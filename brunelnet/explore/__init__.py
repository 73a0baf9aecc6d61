"""explore — Experiments on the Brunel network."""

from .inhibition import (
    compare_inhibition,
    inhibition_report,
)
