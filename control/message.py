"""
ActionRequest: a host action posted to the HostActionMailbox.
"""

from dataclasses import dataclass

from sim.vehicle import HostAction


@dataclass(frozen=True)
class ActionRequest:
    """
    One pending host command.

    Attributes:
        id (str): Unique identifier for the request.
        action (HostAction): The requested command (e.g. braking, requestingLaneChange).
        sender (str): Who posted it (e.g. 'api', 'keyboard').
        ts (float): Timestamp (in seconds) when the request was posted.
    """
    id: str
    action: HostAction
    sender: str
    ts: float
