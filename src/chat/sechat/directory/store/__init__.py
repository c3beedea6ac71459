"""
Credential Store

This package provides the persistent, independently keyed tables the identity
directory reads and writes. Each table is atomic per key and reports storage
failures as absent/False results instead of raising; failures are logged and sent
to Sentry.

Key Components:
- base.py: Shared table plumbing and failure reporting
- meta.py: Write-once Meta table
- profile.py: Profile table with expiry markers
- private_key.py: Local private keys
- contacts.py: Contact lists
- groups.py: Group founder/owner and members
- users.py: Local users and current user
- aliases.py: Alias records
- credentials.py: The composite CredentialStore
"""

from chat.sechat.directory.store.credentials import CredentialStore

__all__ = ["CredentialStore"]
