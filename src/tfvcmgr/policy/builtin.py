"""Policies shipped with tfvcmgr."""

from __future__ import annotations

from typing import Sequence

from tfvcmgr.models import PolicyFailure

from .context import PolicyContext
from .definitions import CheckinPolicy


class CommentRequiredPolicy(CheckinPolicy):
    """Fails when the checkin comment is empty."""

    type_id = "tfvcmgr.policies.CommentRequired-1"
    name = "Changeset comment required"

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        pc = self.pending_checkin
        if pc is None:
            return ()
        comment = pc.pending_changes.get_comment()
        if comment is None or not comment.strip():
            return (PolicyFailure("Please provide a comment for this checkin", self),)
        return ()


class DisallowedPathPolicy(CheckinPolicy):
    """
    Fails for every checked change whose path contains a configured string.

    Configuration:
        disallowed: substring to reject (case-insensitive). Empty disables
        the policy.
    """

    type_id = "tfvcmgr.policies.DisallowedPath-1"
    name = "Disallow file paths"

    def evaluate(self, context: PolicyContext) -> Sequence[PolicyFailure]:
        pc = self.pending_checkin
        disallowed = str(self.configuration.get("disallowed", "")).casefold()
        if pc is None or not disallowed:
            return ()

        failures: list[PolicyFailure] = []
        for change in pc.pending_changes.get_checked_pending_changes():
            context.cancellation_token.raise_if_cancelled()
            path = change.local_item or change.server_item
            if disallowed in path.casefold():
                failures.append(
                    PolicyFailure(
                        f"The checked pending change '{path}' contains the disallowed string "
                        f"'{self.configuration['disallowed']}'",
                        self,
                    )
                )
        return tuple(failures)
