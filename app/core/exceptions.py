"""
Custom application exceptions.
"""

class DiarumAppException(Exception):
    """Base exception for the diary app."""
    pass


class ValidationError(DiarumAppException):
    """Raised when validation fails."""
    pass


class ConfigStoreError(DiarumAppException):
    """Raised when per-user configuration cannot be read or written."""
    pass


class IntegrationUploadError(DiarumAppException):
    """Raised when a relayed upload to an external service fails."""
    pass
