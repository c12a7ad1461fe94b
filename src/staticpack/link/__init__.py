"""Forced linkage: trampoline injection into source units and the companion bootstrap unit."""

from staticpack.link.bootstrap import emit_bootstrap, render_bootstrap
from staticpack.link.mutator import ForceLinkTransaction, recover_leftovers
from staticpack.link.trampoline import Trampoline, plan_trampolines, trampoline_identifier

__all__ = [
    "ForceLinkTransaction",
    "Trampoline",
    "emit_bootstrap",
    "plan_trampolines",
    "recover_leftovers",
    "render_bootstrap",
    "trampoline_identifier",
]
