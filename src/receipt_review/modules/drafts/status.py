from __future__ import annotations

import enum


class DraftStatus(str, enum.Enum):
    NEEDS_INFO = "needs-info"
    VALID = "valid"
    FLAGGED = "flagged"
    PROPOSED = "proposed"
    SUBMITTED = "submitted"
    # Set by reviewers outside this service; no transition here produces them.
    APPROVED = "approved"
    REJECTED = "rejected"
