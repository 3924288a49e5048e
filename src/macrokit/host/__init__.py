"""Host-side contract for classes that accept macros."""

from macrokit.host.macroable import Macroable, MacroableMeta

__all__ = [
    "Macroable",
    "MacroableMeta",
]
