"""Which dimensions of a checkin to evaluate."""

from __future__ import annotations

from enum import Flag


class CheckinEvaluationOptions(Flag):
    """
    Bit set over {NOTES, POLICIES, CONFLICTS}.

    All operations are pure and return new values:
        NOTES.combine(POLICIES).contains(NOTES)  -> True
        ALL.remove(CONFLICTS).contains(CONFLICTS) -> False
        NONE.contains_any(ALL) -> False
    """

    NONE = 0
    NOTES = 1
    POLICIES = 2
    CONFLICTS = 4
    ALL = NOTES | POLICIES | CONFLICTS

    def combine(self, other: "CheckinEvaluationOptions") -> "CheckinEvaluationOptions":
        return self | other

    def remove(self, other: "CheckinEvaluationOptions") -> "CheckinEvaluationOptions":
        return self & ~other

    def retain(self, other: "CheckinEvaluationOptions") -> "CheckinEvaluationOptions":
        return self & other

    def contains_all(self, other: "CheckinEvaluationOptions") -> bool:
        return (self & other) == other

    def contains(self, other: "CheckinEvaluationOptions") -> bool:
        return self.contains_all(other)

    def contains_any(self, other: "CheckinEvaluationOptions") -> bool:
        return bool(self & other)
