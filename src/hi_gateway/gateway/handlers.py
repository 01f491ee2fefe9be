"""Serverless entry points, one per surface.

Each handler accepts the decoded JSON event (or a JSON string) and returns the
response envelope as a JSON-ready dict. Nothing is raised to the host.
"""

import json
from typing import Any, Callable, Optional

from ..config import Config, get_config
from ..hi_transactions.operations import Surface
from ..logging_audit import configure_logging
from ..models.envelope import ErrorCode
from ..provisioning.provisioner import ClientProvisioner
from ..utils.exceptions import ConfigurationError
from .dispatcher import Dispatcher
from .envelope import build_envelope, failure

DEFAULT_FUNCTION_NAMES = {
    Surface.CONSUMER: "hi-gateway-consumer",
    Surface.PROVIDER: "hi-gateway-provider",
    Surface.ORGANISATION: "hi-gateway-organisation",
}


def _function_name(surface: Surface, context: Any) -> str:
    name = getattr(context, "function_name", None)
    return name if isinstance(name, str) and name else DEFAULT_FUNCTION_NAMES[surface]


def _decode_event(event: Any) -> Any:
    if isinstance(event, (str, bytes)):
        return json.loads(event)
    return event


def handle(
    surface: Surface,
    event: Any,
    context: Any = None,
    provisioner_factory: Optional[Callable[[], ClientProvisioner]] = None,
    config: Optional[Config] = None,
) -> dict[str, Any]:
    """Run one invocation for a surface.

    Args:
        surface: Entry surface
        event: Decoded JSON object, or its JSON text
        context: Host invocation context; ``function_name`` is reported as
            ``awsFunction`` when present
        provisioner_factory: Overrides how the ClientProvisioner is created
        config: Configuration to use instead of the cached process configuration

    Returns:
        Response envelope as a dict
    """
    operation_name = _function_name(surface, context)
    if config is None:
        try:
            config = get_config()
            configure_logging(
                level=config.logging.level,
                log_file=config.logging.log_file,
                redact_pii=config.logging.redact_pii,
            )
        except (ConfigurationError, RuntimeError, ValueError) as e:
            code = e.code if isinstance(e, ConfigurationError) else ErrorCode.NONE.value
            return build_envelope(failure(operation_name, code, str(e)))

    try:
        payload = _decode_event(event)
    except ValueError as e:
        return build_envelope(
            failure(operation_name, ErrorCode.PARAM.value, f"Input Parameters - Invalid JSON input: {e}")
        )

    factory = provisioner_factory or (lambda: ClientProvisioner(config))
    dispatcher = Dispatcher(surface, operation_name, factory)
    return build_envelope(dispatcher.dispatch(payload))


def consumer_handler(event: Any, context: Any = None) -> dict[str, Any]:
    """Individual healthcare identifier (IHI) operations."""
    return handle(Surface.CONSUMER, event, context)


def provider_handler(event: Any, context: Any = None) -> dict[str, Any]:
    """Provider individual (HPI-I) operations."""
    return handle(Surface.PROVIDER, event, context)


def organisation_handler(event: Any, context: Any = None) -> dict[str, Any]:
    """Provider organisation (HPI-O) operations."""
    return handle(Surface.ORGANISATION, event, context)
