from typing import List

from .models import StorageLocation


class SlotFinderError(Exception):
    """Base class for errors that abort a slot resolution"""


class StateUnavailableError(SlotFinderError):
    """The chain-state provider could not produce a snapshot"""


class AmbiguousSlotError(SlotFinderError):
    """No candidate cell changed balanceOf when overridden"""

    def __init__(self, token: str, holder: str, candidates: List[StorageLocation]):
        self.token = token
        self.holder = holder
        self.candidates = list(candidates)
        touched = ", ".join(str(c) for c in self.candidates) or "none"
        super().__init__(
            f"Could not definitively identify the ERC20 balance slot for user {holder} "
            f"at token {token}. Touched slots: [{touched}]"
        )
