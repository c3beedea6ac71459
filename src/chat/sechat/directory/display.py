"""Display helpers.

Pure functions over already-resolved data; they never touch storage.
"""

from typing import Optional

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.profile import Profile


def number_string(identifier: ID) -> str:
    """Format the address number as ``xxx-xxx-xxxx``."""
    string = "%010d" % identifier.number
    return f"{string[:3]}-{string[3:6]}-{string[6:]}"


def display_name(identifier: ID, profile: Optional[Profile] = None) -> str:
    """Compose a human-readable name.

    Precedence: ``nickname (username)`` for users, then nickname, then username,
    then the bare address.
    """
    username = identifier.name
    nickname = profile.name if profile is not None else None
    if nickname:
        if identifier.is_user and username:
            return f"{nickname} ({username})"
        return nickname
    if username:
        return username
    return str(identifier.address)
