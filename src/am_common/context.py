"""Per-call execution context: who is calling, with how much attached value, and when."""

from dataclasses import dataclass, field

from src.am_common.datetime_utils import unix_now


@dataclass(frozen=True)
class CallContext:
    sender: str                 # checksum address of the authenticated caller
    value: int = 0              # native value attached to the call, in wei
    now: int = field(default_factory=unix_now)  # unix seconds used for expiry checks
