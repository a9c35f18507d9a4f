"""
HostActionMailbox: depth-one register carrying host commands from the
control surface to the simulation driver.

Supports:
    - Posting a command (a newer post overwrites an unconsumed one)
    - Offering the pending command to the simulation once per tick
    - Explicit acknowledgement by request ID, so a command posted while a
      tick is in flight is never cleared by that tick's acknowledgement

Intended usage:
    - The control surface calls post()
    - The driver calls offer() before a tick and acknowledge() after it
"""

import time
import uuid
import logging
import threading
from typing import Optional, Tuple, Union

from sim.vehicle import HostAction
from .message import ActionRequest
from .metrics import MailboxMetrics

log = logging.getLogger(__name__)


class HostActionMailbox:
    """
    One-slot mailbox for host action requests.

    Attributes:
        metrics (MailboxMetrics): Counters for posted / overwritten / consumed requests.
    """

    def __init__(self):
        """Initialize an empty mailbox."""
        self._current: Optional[ActionRequest] = None
        self._lock = threading.Lock()
        self.metrics = MailboxMetrics()

    def post(self, action: Union[str, HostAction], sender: str = "api") -> Optional[str]:
        """
        Post a host command, replacing any request not yet consumed.

        Args:
            action (str | HostAction): The command. ``cruising`` clears the mailbox.
            sender (str): Who posted it.

        Returns:
            Optional[str]: The request ID, or None when the mailbox was cleared.

        Raises:
            ValueError: If *action* is unknown or is an in-progress state
                (changingLane / returningLane) rather than a command.
        """
        action = HostAction.parse_command(action)
        if action is HostAction.CRUISING:
            self.clear()
            return None

        request = ActionRequest(
            id=str(uuid.uuid4()),
            action=action,
            sender=sender,
            ts=time.time(),
        )
        with self._lock:
            if self._current is not None:
                self.metrics.overwritten += 1
                log.debug("overwrite id=%s action=%s", self._current.id, self._current.action.value)
            self._current = request
            self.metrics.posted += 1

        log.info("post action=%s sender=%s id=%s", action.value, sender, request.id)
        return request.id

    def offer(self) -> Tuple[HostAction, Optional[str]]:
        """
        Return the pending action and its request ID without removing it.

        Returns:
            Tuple[HostAction, Optional[str]]: ``(CRUISING, None)`` when empty.
        """
        with self._lock:
            if self._current is None:
                return HostAction.CRUISING, None
            return self._current.action, self._current.id

    def pending(self) -> HostAction:
        """The pending action, ``CRUISING`` when the mailbox is empty."""
        return self.offer()[0]

    def acknowledge(self, request_id: Optional[str], consumed: bool):
        """
        Report what the simulation did with an offered request.

        Args:
            request_id (Optional[str]): ID returned by offer().
            consumed (bool): The step's *host action consumed* flag.

        Side Effects:
            Clears the mailbox when *consumed* is True and the request is
            still the current one; otherwise leaves it pending.
        """
        if request_id is None:
            return
        with self._lock:
            if self._current is None or self._current.id != request_id:
                return
            if consumed:
                self._current = None
                self.metrics.consumed += 1
            else:
                self.metrics.reoffered += 1
        if consumed:
            log.info("ack id=%s", request_id)

    def clear(self):
        """Drop any pending request."""
        with self._lock:
            self._current = None
