"""Hysteresis gate: debounces scaling decisions."""

from autoplug.engine.policy import Decision


class HysteresisGate:
    """Requires a streak of qualifying samples before a single-step action.

    A streak counts the current tick, so it starts at 1 and is reset to 1.
    With a threshold of 3, the action fires on the 3rd consecutive
    qualifying sample. Bulk scale-up is never gated.
    """

    def __init__(self):
        self.online_streak = 1
        self.offline_streak = 1

    def reset(self):
        self.online_streak = 1
        self.offline_streak = 1

    def observe(
        self,
        decision: Decision,
        online_threshold: int,
        offline_threshold: int,
        vetoed: bool = False
    ) -> Decision:
        """Feed one policy decision, get back the action to take (or HOLD).

        Args:
            decision: policy output for this tick
            online_threshold: streak needed to add a unit
            offline_threshold: streak needed to remove a unit
            vetoed: scale-down is blocked this tick (I/O wait); the
                offline streak is kept so the action happens once the
                veto clears
        """
        if decision is Decision.SCALE_ALL_UP:
            self.reset()
            return Decision.SCALE_ALL_UP

        if decision is Decision.SCALE_UP_ONE:
            self.offline_streak = 1
            if self.online_streak >= online_threshold:
                self.online_streak = 1
                return Decision.SCALE_UP_ONE
            self.online_streak += 1
            return Decision.HOLD

        if decision is Decision.SCALE_DOWN_ONE:
            self.online_streak = 1
            if self.offline_streak >= offline_threshold:
                if vetoed:
                    return Decision.HOLD
                self.offline_streak = 1
                return Decision.SCALE_DOWN_ONE
            self.offline_streak += 1
            return Decision.HOLD

        self.reset()
        return Decision.HOLD
