"""Operation dispatch pipeline.

One ``Dispatcher`` serves one entry surface. ``dispatch`` walks a fixed state
sequence and always returns a ResponseEnvelope; any failure short-circuits to
``Done`` with a FAILURE envelope.

    ValidatingInput -> ProvisioningClient -> ClassifyingRequest
        -> InvokingRemote -> NormalizingOutcome -> Done
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..hi_transactions.classifier import classify
from ..hi_transactions.operations import OperationDescriptor, Surface, resolve_mode
from ..hi_transactions.parsers import element_to_dict
from ..hi_transactions.request_builders import get_string_property
from ..hi_transactions.soap_client import RegistryClient
from ..logging_audit import get_operation_logger, log_audit_event
from ..models.envelope import ErrorCode, ResponseEnvelope
from ..provisioning.provisioner import ClientProvisioner
from ..utils.exceptions import HIGatewayError, ServiceFault, ValidationError, create_error_info
from .envelope import failure, success
from .faults import normalize_fault

MODE_FIELD = "internalMode"
USER_FIELD = "internalUserId"
HPIO_FIELD = "internalHPIO"
REQUIRED_FIELDS = (MODE_FIELD, USER_FIELD, HPIO_FIELD)


class DispatchState(str, Enum):
    """States of one dispatch."""

    VALIDATING_INPUT = "ValidatingInput"
    PROVISIONING_CLIENT = "ProvisioningClient"
    CLASSIFYING_REQUEST = "ClassifyingRequest"
    INVOKING_REMOTE = "InvokingRemote"
    NORMALIZING_OUTCOME = "NormalizingOutcome"
    DONE = "Done"


def missing_field_message(name: str) -> str:
    return f"Input Parameters - Missing or empty {name}."


def unknown_mode_message(mode: str) -> str:
    return f"Input Parameters - Unknown internalMode '{mode}'."


@dataclass
class DispatchContext:
    """Working state of one dispatch.

    Attributes:
        payload: Caller's input mapping
        state: Current state
        history: States entered, in order
        descriptor: Resolved operation
        client: Provisioned client handle
        request: Typed (and, where applicable, classified) request
        action: Remote action of the selected search variant
        result: Result element returned by the registry
        envelope: Final envelope once Done
    """

    payload: Any
    state: DispatchState = DispatchState.VALIDATING_INPUT
    history: list[DispatchState] = field(default_factory=list)
    descriptor: Optional[OperationDescriptor] = None
    user_id: Optional[str] = None
    hpio: Optional[str] = None
    client: Optional[RegistryClient] = None
    request: Any = None
    action: Optional[str] = None
    result: Any = None
    envelope: Optional[ResponseEnvelope] = None

    def enter(self, state: DispatchState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def raw_request(self) -> Optional[str]:
        return self.client.soap_request if self.client is not None else None

    @property
    def raw_response(self) -> Optional[str]:
        return self.client.soap_response if self.client is not None else None


class Dispatcher:
    """Runs the dispatch pipeline for one entry surface.

    Attributes:
        surface: Entry surface whose modes are accepted
        operation_name: Function name reported as ``awsFunction``
        provisioner_factory: Creates the ClientProvisioner for an invocation

    Example:
        >>> dispatcher = Dispatcher(Surface.CONSUMER, "hi-consumer", lambda: ClientProvisioner(config))
        >>> envelope = dispatcher.dispatch({"internalMode": "1", "internalUserId": "jsmith",
        ...                                 "internalHPIO": "8003620000000000",
        ...                                 "medicareCardNumberField": "2950141861"})
        >>> envelope.status
        <Status.SUCCESS: 'SUCCESS'>
    """

    def __init__(
        self,
        surface: Surface,
        operation_name: str,
        provisioner_factory: Callable[[], ClientProvisioner],
    ) -> None:
        self.surface = surface
        self.operation_name = operation_name
        self.provisioner_factory = provisioner_factory
        self.logger = get_operation_logger(surface.value)

    def dispatch(self, payload: Any) -> ResponseEnvelope:
        """Process one invocation. Never raises.

        Args:
            payload: Decoded JSON input

        Returns:
            ResponseEnvelope describing the outcome
        """
        start_time = time.time()
        ctx = DispatchContext(payload=payload)
        steps = (
            (DispatchState.VALIDATING_INPUT, self._validate_input),
            (DispatchState.PROVISIONING_CLIENT, self._provision_client),
            (DispatchState.CLASSIFYING_REQUEST, self._classify_request),
            (DispatchState.INVOKING_REMOTE, self._invoke_remote),
            (DispatchState.NORMALIZING_OUTCOME, self._normalize_outcome),
        )

        for state, step in steps:
            ctx.enter(state)
            try:
                envelope = step(ctx)
            except HIGatewayError as e:
                self.logger.error(f"{state.value} failed: {e}")
                envelope = self._failure_from_exception(ctx, e)
            except Exception as e:
                self.logger.error(f"Unexpected failure in {state.value}: {e}", exc_info=True)
                envelope = self._failure_from_exception(ctx, e)
            if envelope is not None:
                ctx.envelope = envelope
                break

        ctx.enter(DispatchState.DONE)
        envelope = ctx.envelope
        if envelope is None:
            envelope = failure(self.operation_name, ErrorCode.NONE.value, "No outcome was produced.")

        details = {
            "status": "success" if envelope.is_success else "failure",
            "operation": ctx.descriptor.key if ctx.descriptor else "unresolved",
            "duration": time.time() - start_time,
            "states": " > ".join(s.value for s in ctx.history),
        }
        if not envelope.is_success:
            details["error_message"] = f"{envelope.code} {envelope.reason}"[:200]
        log_audit_event("INVOCATION_COMPLETED", details)
        return envelope

    def _failure_from_exception(self, ctx: DispatchContext, exc: Exception) -> ResponseEnvelope:
        info = create_error_info(exc)
        self.logger.info(f"{info.category.value} {info.error_type}: {info.remediation}")
        if info.technical_details:
            self.logger.debug(info.technical_details)
        return failure(
            self.operation_name,
            code=info.code,
            reason=info.message,
            severity=info.severity,
            raw_request=ctx.raw_request,
            raw_response=ctx.raw_response,
        )

    def _validate_input(self, ctx: DispatchContext) -> Optional[ResponseEnvelope]:
        payload = ctx.payload if isinstance(ctx.payload, Mapping) else {}
        values = {}
        for name in REQUIRED_FIELDS:
            value = get_string_property(payload, name)
            if value is None:
                self.logger.warning(f"Rejected invocation: {name} missing or empty")
                raise ValidationError(missing_field_message(name))
            values[name] = value

        mode = values[MODE_FIELD].strip()
        descriptor = resolve_mode(self.surface, mode)
        if descriptor is None:
            self.logger.warning(f"Rejected invocation: unknown {MODE_FIELD} {mode!r}")
            raise ValidationError(unknown_mode_message(mode))

        ctx.payload = payload
        ctx.descriptor = descriptor
        ctx.user_id = values[USER_FIELD]
        ctx.hpio = values[HPIO_FIELD]
        self.logger.info(f"{descriptor.label} requested by {ctx.user_id}")
        return None

    def _provision_client(self, ctx: DispatchContext) -> Optional[ResponseEnvelope]:
        ctx.client = self.provisioner_factory().provision(ctx.descriptor.key, ctx.user_id, ctx.hpio)
        return None

    def _classify_request(self, ctx: DispatchContext) -> Optional[ResponseEnvelope]:
        request = ctx.descriptor.build_request(ctx.payload)
        family = ctx.descriptor.classifier_family
        if family is not None:
            classified = classify(family, request)
            if classified is None:
                return failure(self.operation_name, ErrorCode.PARAM.value, family.failure_message)
            variant, request = classified
            ctx.action = variant.action
            self.logger.info(f"{ctx.descriptor.key}: {variant.name}")
        ctx.request = request
        return None

    def _invoke_remote(self, ctx: DispatchContext) -> Optional[ResponseEnvelope]:
        try:
            ctx.result = ctx.client.invoke(ctx.request, action=ctx.action)
        except ServiceFault as fault:
            return normalize_fault(
                ctx.descriptor.key,
                fault,
                self.operation_name,
                raw_request=ctx.raw_request,
                raw_response=ctx.raw_response,
            )
        return None

    def _normalize_outcome(self, ctx: DispatchContext) -> Optional[ResponseEnvelope]:
        reason = json.dumps(element_to_dict(ctx.result), separators=(",", ":"), ensure_ascii=False)
        return success(
            self.operation_name,
            reason,
            raw_request=ctx.raw_request,
            raw_response=ctx.raw_response,
        )
