"""
control — Host command plumbing
================================

Carries host action requests from an external control surface into the
simulation driver, one request at a time, with explicit acknowledgement.

Modules
-------
message
    :class:`ActionRequest` dataclass.
mailbox
    :class:`HostActionMailbox` post / offer / acknowledge register.
metrics
    :class:`MailboxMetrics` counter snapshot.
api
    FastAPI control surface (:func:`create_app`).
"""

from .message import ActionRequest
from .mailbox import HostActionMailbox
from .metrics import MailboxMetrics

__all__ = [
    "ActionRequest",
    "HostActionMailbox",
    "MailboxMetrics",
]
