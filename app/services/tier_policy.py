"""
Caller-tier policies.

A policy decides how a caller's tier shapes a model call. Handlers pick one
by name from settings, so tier behaviour can change without touching the
pipeline.
"""
import asyncio
import logging
from abc import ABC, abstractmethod

from app.core.config import Settings
from app.domain.enums import CallerTier, TierPolicyName
from app.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TierPolicy(ABC):
    """Base class for tier policies"""

    @abstractmethod
    async def select_model(self, tier: CallerTier) -> str:
        """
        Apply the policy and return the model to call.

        May suspend (e.g. to shape latency) before returning.
        """


class CapabilityTierPolicy(TierPolicy):
    """Executive callers get the more capable model"""

    def __init__(self, standard_model: str, executive_model: str):
        self.standard_model = standard_model
        self.executive_model = executive_model

    async def select_model(self, tier: CallerTier) -> str:
        if tier == CallerTier.EXECUTIVE:
            return self.executive_model
        return self.standard_model


class QueueTierPolicy(TierPolicy):
    """Everyone gets the same model; standard callers wait in a simulated queue"""

    def __init__(self, model: str, standard_delay_seconds: float):
        self.model = model
        self.standard_delay_seconds = standard_delay_seconds

    async def select_model(self, tier: CallerTier) -> str:
        if tier != CallerTier.EXECUTIVE and self.standard_delay_seconds > 0:
            logger.info(f"Standard tier: simulating processing queue ({self.standard_delay_seconds}s)")
            await asyncio.sleep(self.standard_delay_seconds)
        return self.model


def build_tier_policy(name: str, settings: Settings, model: str) -> TierPolicy:
    """
    Build a tier policy by name.

    Args:
        name: "capability" or "queue"
        settings: Application settings
        model: Model used by the queue policy (the capability policy reads both tier models from settings)

    Raises:
        ConfigurationError: If the policy name is unknown
    """
    try:
        policy = TierPolicyName(name.strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown tier policy: {name}")

    if policy == TierPolicyName.CAPABILITY:
        return CapabilityTierPolicy(settings.MODEL_STANDARD, settings.MODEL_EXECUTIVE)
    return QueueTierPolicy(model, settings.STANDARD_TIER_DELAY_SECONDS)
