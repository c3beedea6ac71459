"""Default group relationship policy.

Used when the credential store has no explicit founder or owner for a group.
These are plain functions over already-resolved data so they can be reasoned
about and tested without any storage.
"""

from typing import Mapping, Optional, Sequence

from chat.sechat.directory.mkm.identifier import ANYWHERE, ID
from chat.sechat.directory.mkm.meta import Meta


def _broadcast_role(group: ID, role: str) -> ID:
    # "everyone@everywhere" -> "founder@anywhere", "vip.everyone@everywhere" -> "vip.founder@anywhere"
    name = group.name or ""
    prefix = ""
    if name and name != "everyone":
        prefix = name[: -len(".everyone")] if name.endswith(".everyone") else name
    return ID(f"{prefix}.{role}" if prefix else role, ANYWHERE)


def default_founder(
    group: ID,
    group_meta: Optional[Meta],
    members: Sequence[ID],
    member_metas: Mapping[ID, Meta],
) -> Optional[ID]:
    """Derive the founder of a group.

    A broadcast group has a well-known founder. Otherwise the founder is the first
    member whose Meta key is the key that created the group Meta.
    """
    if group.is_broadcast:
        return _broadcast_role(group, "founder")
    if group_meta is None or group_meta.is_empty:
        return None
    for member in members:
        meta = member_metas.get(member)
        if meta is None or meta.is_empty:
            continue
        if group_meta.match_key(meta.public_key):
            return member
    return None


def default_owner(group: ID, founder: Optional[ID]) -> Optional[ID]:
    """Derive the owner of a group: broadcast groups have a well-known owner, others default to the founder."""
    if group.is_broadcast:
        return _broadcast_role(group, "owner")
    if group.is_group:
        return founder
    return None
