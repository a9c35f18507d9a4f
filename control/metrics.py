"""
MailboxMetrics: Tracks simple statistics for host action requests.
"""


class MailboxMetrics:
    """
    Tracks how host action requests were handled.

    Attributes:
        posted (int): Requests accepted into the mailbox.
        overwritten (int): Requests replaced by a newer one before being consumed.
        consumed (int): Requests the simulation reported as consumed.
        reoffered (int): Ticks on which a pending request was offered but not consumed.
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.posted = 0
        self.overwritten = 0
        self.consumed = 0
        self.reoffered = 0

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Dictionary containing 'posted', 'overwritten', 'consumed' and 'reoffered' counters.
        """
        return {
            "posted": self.posted,
            "overwritten": self.overwritten,
            "consumed": self.consumed,
            "reoffered": self.reoffered,
        }
