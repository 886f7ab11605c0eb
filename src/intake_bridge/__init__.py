"""Backend integration and resilience layer for the service-request intake app."""

import importlib.metadata
import logging

from intake_bridge.bridge import IntakeBridge, create_bridge
from intake_bridge.config import FrozenConfig, ResolvedConfig, resolve_config
from intake_bridge.core.models import (
    Attachment,
    Company,
    HistoryEntry,
    Property,
    SurveyPayload,
    UserSession,
)
from intake_bridge.core.types import (
    Action,
    ApplicationFailure,
    ClassifiedResponse,
    DegradedResult,
    DiagnosticCause,
    HeartbeatOutcome,
    RequestEnvelope,
    Success,
    SurveyForm,
    TransportFailure,
)
from intake_bridge.exceptions import (
    ApplicationError,
    ConfigurationError,
    ConversationBusyError,
    DraftGenerationError,
    HttpStatusError,
    IntakeBridgeError,
    NetworkError,
    TransportFailureError,
    ValidationError,
)
from intake_bridge.extensions.chat import ChatAggregator, ChatEntry, ChatPhase
from intake_bridge.generation.draft import DraftGenerator
from intake_bridge.pipeline.fallback import FallbackCoordinator
from intake_bridge.response.classifier import classify
from intake_bridge.services.backend import BackendService

try:
    __version__ = importlib.metadata.version("intake-bridge")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Composition
    "IntakeBridge",
    "create_bridge",
    # Configuration
    "resolve_config",
    "ResolvedConfig",
    "FrozenConfig",
    # Operations
    "BackendService",
    "FallbackCoordinator",
    "classify",
    "ChatAggregator",
    "ChatEntry",
    "ChatPhase",
    "DraftGenerator",
    # Core types
    "Action",
    "RequestEnvelope",
    "ClassifiedResponse",
    "Success",
    "ApplicationFailure",
    "TransportFailure",
    "DiagnosticCause",
    "DegradedResult",
    "HeartbeatOutcome",
    "SurveyForm",
    # Wire models
    "Attachment",
    "Company",
    "Property",
    "UserSession",
    "HistoryEntry",
    "SurveyPayload",
    # Exceptions
    "IntakeBridgeError",
    "ConfigurationError",
    "NetworkError",
    "HttpStatusError",
    "TransportFailureError",
    "ApplicationError",
    "ValidationError",
    "DraftGenerationError",
    "ConversationBusyError",
]
