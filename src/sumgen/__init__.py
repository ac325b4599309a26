"""sumgen package root."""

from sumgen.exceptions import NeverThrown, SumgenError
from sumgen.invariants import never

__all__ = ["__version__", "NeverThrown", "SumgenError", "never"]

__version__ = "0.3.0"
