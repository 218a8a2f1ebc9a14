# bookmarket/visibility.py
"""Who may see a listing, and what they see of it.

Admins and owners see every listing in full. Everyone else sees approved
listings only, and never the owner reference.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .models import Listing
from .schemas import ListingOut, SessionData


@dataclass(frozen=True)
class Decision:
    visible: bool
    redact_owner: bool = False


def decide(caller: Optional[SessionData], listing: Listing) -> Decision:
    if caller is not None and caller.admin:
        return Decision(visible=True)
    if caller is not None and caller.user_id == listing.owner_id:
        return Decision(visible=True)
    if listing.pending_review:
        return Decision(visible=False)
    return Decision(visible=True, redact_owner=True)


def present(listing: Listing, decision: Decision) -> Dict[str, Any]:
    """Serialize a visible listing for the wire, applying redactions."""
    exclude = {"owner_id"} if decision.redact_owner else None
    return ListingOut.model_validate(listing).model_dump(by_alias=True, mode="json", exclude=exclude)


def present_all(caller: Optional[SessionData], listings) -> list:
    out = []
    for listing in listings:
        decision = decide(caller, listing)
        if decision.visible:
            out.append(present(listing, decision))
    return out
