"""
Enumerations for domain models
"""
from enum import Enum


class CallerTier(str, Enum):
    """Caller entitlement tier"""
    STANDARD = "standard"
    EXECUTIVE = "executive"

    @classmethod
    def from_flag(cls, is_executive: bool) -> "CallerTier":
        return cls.EXECUTIVE if is_executive else cls.STANDARD


class ImportStatus(str, Enum):
    """Recipe import classification"""
    FOUND = "found"
    EMPTY = "empty"
    ERROR = "error"


class GenerationMode(str, Enum):
    """Recipe generation modes"""
    DISCOVER = "discover"
    PANTRY_CHEF = "pantry_chef"
    CONSULT_CHEF = "consult_chef"


class TierPolicyName(str, Enum):
    """How caller tier shapes a model call"""
    CAPABILITY = "capability"  # Higher tier gets a more capable model
    QUEUE = "queue"  # Same model, standard tier waits first
