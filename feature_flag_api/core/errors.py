"""
Error types for the Feature Flag API
"""


class FeatureFlagError(Exception):
    """Base class for feature flag domain errors"""


class FlagNotFoundError(FeatureFlagError):
    """Raised when a feature key is absent from the store"""

    def __init__(self, key: str):
        self.key = key
        super().__init__("Unable to find feature")


class FlagAlreadyExistsError(FeatureFlagError):
    """Raised when creating a feature whose key is already stored"""

    def __init__(self, key: str):
        self.key = key
        super().__init__("Feature already exists")


class FlagValidationError(FeatureFlagError):
    """A feature flag failed validation"""

    kind = "invalid_feature"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidPercentageError(FlagValidationError):
    kind = "invalid_percentage"


class InvalidKeyLengthError(FlagValidationError):
    kind = "invalid_key_length"


class InvalidKeyFormatError(FlagValidationError):
    kind = "invalid_key_format"


class StoreError(FeatureFlagError):
    """The underlying store failed (I/O, locking, corrupt record)"""
