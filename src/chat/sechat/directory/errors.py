class DirectoryException(Exception):
    """
    Raised when the directory's persistent state is internally inconsistent.

    Verification failures and missing records are ordinary outcomes and are never
    raised; this exception is reserved for invariant violations that must abort
    the operation.
    """

    @staticmethod
    def local_user_unresolved(identifier) -> "DirectoryException":
        """A recorded local user has no loadable Meta."""
        return DirectoryException(
            f"error-directory-1000 Failed to load local user: {identifier}"
        )

    @staticmethod
    def immortals_invalid(identifier, reason: str) -> "DirectoryException":
        """A built-in record failed verification while loading."""
        return DirectoryException(
            f"error-directory-1001 Invalid built-in record {identifier}: {reason}"
        )

    @staticmethod
    def registration_failed(identifier, reason: str) -> "DirectoryException":
        """Freshly generated credentials for a new local user were not persisted."""
        return DirectoryException(
            f"error-directory-1002 Failed to register {identifier}: {reason}"
        )
