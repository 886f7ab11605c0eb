"""Named backend operations.

:class:`BackendService` is the only place that builds request envelopes and
validates payloads. Every call is routed through the
:class:`~intake_bridge.pipeline.fallback.FallbackCoordinator`; each
operation decides whether a substitute exists for it:

==================  ===========================================
operation           substitute
==================  ===========================================
fetch_directory     canned directory
authenticate        none (demo session only in demo mode)
submit_intake       none
fetch_history       canned history
send_heartbeat      none; degrades to a blind send instead
==================  ===========================================
"""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from intake_bridge.client.transport import HttpTransport
from intake_bridge.constants import (
    EMPTY_NOTES,
    UNKNOWN_PROPERTY_ADDRESS,
    UNKNOWN_PROPERTY_NAME,
)
from intake_bridge.core.models import (
    Company,
    HistoryEntry,
    Property,
    SurveyPayload,
    UserSession,
)
from intake_bridge.core.types import (
    Action,
    DegradedResult,
    DiagnosticCause,
    HeartbeatOutcome,
    RequestEnvelope,
    SurveyForm,
)
from intake_bridge.exceptions import (
    ApplicationError,
    ConfigurationError,
    HttpStatusError,
    NetworkError,
    TransportFailureError,
    ValidationError,
)
from intake_bridge.pipeline.fallback import FallbackCoordinator
from intake_bridge.services import substitutes
from intake_bridge.services.attachments import normalize_attachment
from intake_bridge.services.recovery import JSONRecoveryStore, form_from_draft
from intake_bridge.services.validation import validate_survey

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from intake_bridge.config import FrozenConfig
    from intake_bridge.services.recovery import RecoveryStore

logger = logging.getLogger(__name__)

_DIRECTORY = TypeAdapter(list[Company])
_HISTORY = TypeAdapter(list[HistoryEntry])
_SESSION = TypeAdapter(UserSession)

ACCESS_CODE_REQUIRED = "Please enter an access code."


def _parse[T](adapter: TypeAdapter[T], value: Any, action: Action) -> T:
    """Validate a response fragment; a schema mismatch is a malformed body."""
    try:
        return adapter.validate_python(value)
    except PydanticValidationError as e:
        raise TransportFailureError(
            DiagnosticCause.MALFORMED_BODY,
            f"Backend response for '{action.value}' has an unexpected shape: {e}",
        ) from e


def _field[T](
    adapter: TypeAdapter[T], key: str, action: Action, *, required: bool = False
) -> Callable[[dict[str, Any]], T]:
    """Parser for one key of a response body, run inside the fallback boundary.

    An absent optional key parses as an empty list.
    """

    def parse(body: dict[str, Any]) -> T:
        value = body.get(key)
        if value is None and required:
            raise TransportFailureError(
                DiagnosticCause.MALFORMED_BODY,
                f"Backend response for '{action.value}' did not include '{key}'.",
            )
        return _parse(adapter, value if required else value or [], action)

    return parse


def _check_url(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        raise ConfigurationError(f"API URL must be an http(s) URL, got {url!r}")
    return url


def build_payload(form: SurveyForm, properties: Sequence[Property] = ()) -> SurveyPayload:
    """Validate ``form`` and build the wire payload.

    ``properties`` is searched for ``form.property_id`` to fill in the
    property name and address.

    Raises:
        ValidationError: The first validation rule the form breaks.
    """
    validate_survey(form)
    prop = next((p for p in properties if p.id == form.property_id), None)
    return SurveyPayload(
        property_id=form.property_id,
        property_name=prop.name if prop else UNKNOWN_PROPERTY_NAME,
        property_address=prop.address if prop else UNKNOWN_PROPERTY_ADDRESS,
        first_name=form.first_name,
        last_name=form.last_name,
        title=form.title,
        phone=form.phone,
        email=form.email,
        unit_info=form.unit_info,
        services=list(form.services),
        other_service=form.other_service,
        timeline=form.timeline,
        notes=form.notes.strip() or EMPTY_NOTES,
        contact_methods=list(form.contact_methods),
        attachments=[normalize_attachment(a) for a in form.attachments],
    )


class BackendService:
    """Domain operations against the intake backend.

    Args:
        config: Frozen configuration; ``api_url`` must be set before any call.
        coordinator: Injected coordinator; defaults to one over
            :class:`HttpTransport` using ``config.fallback_delay_seconds``.
        recovery_store: Where successful submissions, the form draft and a
            saved endpoint override live; defaults to a JSON file at
            ``config.recovery_path`` when one is configured.

    The endpoint is the saved override when there is one, else
    ``config.api_url``.
    """

    def __init__(
        self,
        config: FrozenConfig,
        *,
        coordinator: FallbackCoordinator | None = None,
        recovery_store: RecoveryStore | None = None,
    ) -> None:
        self._config = config
        self._coordinator = coordinator or FallbackCoordinator(
            HttpTransport(), delay_seconds=config.fallback_delay_seconds
        )
        if recovery_store is None and config.recovery_path is not None:
            recovery_store = JSONRecoveryStore(config.recovery_path)
        self._recovery_store = recovery_store
        self._api_url_override: str | None = None
        if recovery_store is not None:
            self._api_url_override = recovery_store.load_api_url()

    @property
    def config(self) -> FrozenConfig:
        return self._config

    @property
    def api_url(self) -> str | None:
        """The endpoint calls go to, or ``None`` when nothing is configured."""
        return self._api_url_override or self._config.api_url

    def _url(self) -> str:
        url = self.api_url
        if not url:
            raise ConfigurationError(
                "No API URL configured. Set INTAKE_API_URL or pass api_url."
            )
        return url

    async def fetch_directory(
        self, api_url: str | None = None
    ) -> DegradedResult[list[Company]]:
        """Companies and their properties, for the selection UI.

        Args:
            api_url: Try this endpoint instead of the current one. It becomes
                the saved override only if it returned live data.

        Raises:
            ConfigurationError: ``api_url`` is not an http(s) URL.
        """
        url = _check_url(api_url) if api_url is not None else self._url()
        result = await self._coordinator.execute(
            url,
            RequestEnvelope(Action.GET_COMPANY_DATA),
            substitutes.directory_response(),
            parse=_field(_DIRECTORY, "data", Action.GET_COMPANY_DATA),
            cache_bust=True,
        )
        if api_url is not None and not result.is_fallback:
            self._remember_api_url(url)
        return result

    async def authenticate(self, access_code: str) -> DegradedResult[UserSession]:
        """Exchange an access code for a session.

        Failures always propagate, except for the reserved demo code while
        ``demo_mode`` is enabled, which may fall back to a canned session.

        Raises:
            ValidationError: Blank access code.
            ApplicationError: The backend rejected the code (message verbatim).
        """
        code = access_code.strip().upper()
        if not code:
            raise ValidationError(ACCESS_CODE_REQUIRED)

        substitute = None
        if self._config.demo_mode and code == self._config.demo_access_code:
            substitute = substitutes.demo_session_response()

        result = await self._coordinator.execute(
            self._url(),
            RequestEnvelope(Action.LOGIN, {"accessCode": code}),
            substitute,
            parse=_field(_SESSION, "session", Action.LOGIN, required=True),
        )
        logger.debug(
            "Authenticated as %s (fallback=%s)", result.value.role, result.is_fallback
        )
        return result

    async def submit_intake(
        self,
        form: SurveyForm,
        *,
        properties: Sequence[Property] = (),
    ) -> DegradedResult[dict[str, Any]]:
        """Validate and submit an intake; failures are never faked as success.

        On success the exact payload sent is archived to the recovery store
        and the saved draft is deleted.

        Raises:
            ValidationError: Before any network activity.
            ApplicationError: With the backend's exact message.
        """
        payload = build_payload(form, properties)
        wire = payload.to_wire()
        result = await self._coordinator.execute(
            self._url(),
            RequestEnvelope(Action.SUBMIT_SURVEY_DATA, wire),
        )
        if self._recovery_store is not None:
            # The submission already succeeded; local write failures must not undo that
            try:
                self._recovery_store.save(wire)
            except OSError as e:
                logger.warning("Could not write recovery copy: %s", e)
            try:
                self._recovery_store.clear_draft()
            except OSError as e:
                logger.warning("Could not delete saved draft: %s", e)
        logger.info(
            "Submitted intake for %s with %d attachment(s)",
            payload.property_name,
            len(payload.attachments),
        )
        return result

    async def fetch_history(
        self, property_name: str
    ) -> DegradedResult[list[HistoryEntry]]:
        """Past submissions for a property."""
        result = await self._coordinator.execute(
            self._url(),
            RequestEnvelope(Action.GET_HISTORY, {"propertyName": property_name}),
            substitutes.history_response(property_name),
            parse=_field(_HISTORY, "history", Action.GET_HISTORY),
            cache_bust=True,
        )
        return result

    def save_draft(self, form: SurveyForm) -> None:
        """Save the in-progress form, without attachments.

        Does nothing when no recovery store is configured.
        """
        if self._recovery_store is not None:
            self._recovery_store.save_draft(form)

    def restore_draft(self, **prefill: Any) -> SurveyForm:
        """Form to open with: defaults, then the saved draft, then ``prefill``.

        ``prefill`` carries values from the launch link (``property_id``,
        ``email`` and so on); ``None`` values are ignored.
        """
        draft = None
        if self._recovery_store is not None:
            draft = self._recovery_store.load_draft()
        return form_from_draft(draft, **prefill)

    def _remember_api_url(self, url: str) -> None:
        self._api_url_override = url
        if self._recovery_store is None:
            return
        try:
            self._recovery_store.save_api_url(url)
        except OSError as e:
            logger.warning("Could not save API URL override: %s", e)
        else:
            logger.info("Saved API URL override %s", url)

    async def send_heartbeat(self) -> DegradedResult[HeartbeatOutcome]:
        """Check the backend is reachable; never raises for network reasons.

        ``CONFIRMED`` when the backend answered with success, ``BLIND_SENT``
        when only an unread request could be sent, ``FAILED`` otherwise.
        """
        url = self._url()
        envelope = RequestEnvelope(
            Action.TEST_CHAT, {"timestamp": datetime.now(UTC).isoformat()}
        )
        try:
            await self._coordinator.execute(url, envelope)
        except ApplicationError as e:
            logger.warning("Heartbeat rejected by backend: %s", e)
            return DegradedResult(HeartbeatOutcome.FAILED)
        except (NetworkError, HttpStatusError, TransportFailureError):
            try:
                await self._coordinator.send_blind(url, envelope)
            except NetworkError as e:
                logger.warning("Heartbeat blind send failed: %s", e)
                return DegradedResult(HeartbeatOutcome.FAILED)
            return DegradedResult(HeartbeatOutcome.BLIND_SENT)
        return DegradedResult(HeartbeatOutcome.CONFIRMED)
