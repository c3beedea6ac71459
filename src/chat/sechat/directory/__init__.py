"""
Sechat Identity Directory

This package implements the credential resolution and caching layer of the Sechat
messaging client. It maps decentralized identity handles to their cryptographic
metadata (identity certificate, signed profile, private keys, contacts and group
membership) with verification, expiry and a built-in fallback record set.

Key Components:
- mkm: Identity primitives (handles, addresses, keys, Meta certificates, signed Profiles)
- model: Database models for the credential store
- store: Credential store tables with per-key atomic writes
- ans: Alias resolver mapping short names to handles
- immortals: Built-in, pre-verified record set used as an offline fallback
- directory: The identity directory façade consumed by the UI and messaging layers
- app: Configuration, logging, metrics and runtime wiring

Lookup Flow:
1. Callers ask the directory about a handle
2. The directory consults the credential store
3. On a miss (or a stale profile) it falls back to the built-in record set,
   back-filling the store on a hit
4. Stale or missing profiles are queued for the network layer to refresh

Writes are verified before they are persisted: a Meta must match the handle it is
stored under and a Profile must carry a valid signature from its owner.
"""
