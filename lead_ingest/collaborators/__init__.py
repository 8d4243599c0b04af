"""External validation and enrichment collaborators."""

from .base import (  # noqa: F401
    CollaboratorError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
    EnricherProtocol,
    ValidatorProtocol,
)
from .sample import EchoEnricher, RuleBasedValidator  # noqa: F401

__all__ = [
    "CollaboratorError",
    "CollaboratorTimeoutError",
    "CollaboratorUnavailableError",
    "EchoEnricher",
    "EnricherProtocol",
    "RuleBasedValidator",
    "ValidatorProtocol",
]
