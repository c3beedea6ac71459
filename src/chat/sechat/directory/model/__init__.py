"""
Database Models

This package defines the database models for the credential store using SQLAlchemy ORM.
Every table is keyed by identity address, so handles that differ only in name
or terminal share one row. Where a handle must be returned, its named form is
kept in a separate column. Tables are written independently of each other;
there are no cross-table transactions.

Key Models:
- base.py: Base SQLAlchemy model, shared column types and dialect-aware upserts
- meta.py: Write-once identity certificates
- profile.py: Signed profiles with their expiry marker
- private_key.py: Local private keys
- contacts.py: Per-user contact lists
- groups.py: Group founder/owner and membership
- users.py: Local users and the current user
- aliases.py: Short-name to handle bindings

Ordered collections (contacts, members, local users) use autoincrement primary keys
so that rows sort in insertion order. Alias rows use ULID primary keys.
"""
