"""Static table of the supported registry operations.

Each operation is described once by an ``OperationDescriptor``: its stable
key, the entry surface and mode that select it, the identity types of its
schema release, the SOAP binding, its request builder, its classifier family
and the element that carries its result. Fault-detail shapes are registered
separately in ``FAULT_DESCRIPTORS``.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from ..models.identity import (
    RELEASE_3,
    RELEASE_32,
    RELEASE_40,
    RELEASE_50,
    RELEASE_302,
    IdentityTypes,
)
from ..utils.exceptions import UnknownOperationError
from . import request_builders as builders
from .classifier import (
    ORGANISATION_DIRECTORY_SEARCH,
    PERSON_SEARCH,
    PROVIDER_DIRECTORY_INDIVIDUAL_SEARCH,
    PROVIDER_INDIVIDUAL_SEARCH,
    ClassifierFamily,
)

SERVICE_NS_BASE = "http://ns.electronichealth.net.au/hi/svc"
COMMON_CORE_NS_BASE = "http://ns.electronichealth.net.au/hi/xsd/common/CommonCoreElements"

UNKNOWN_OPERATION_MESSAGE = (
    "Unknown clientType or missing parameters. Please contact the system administrator."
)


class Surface(str, Enum):
    """Entry surfaces, one serverless function each."""

    CONSUMER = "consumer"
    PROVIDER = "provider"
    ORGANISATION = "organisation"


@dataclass(frozen=True)
class ServiceBinding:
    """Where and how an operation is posted.

    Attributes:
        service: Service name, e.g. ``ConsumerSearchIHI``
        version: Service version in the endpoint path, e.g. ``3.0``
        request_element: Local name of the SOAP body element
    """

    service: str
    version: str
    request_element: str

    @property
    def path(self) -> str:
        """Path appended to the registry endpoint URI."""
        return f"{self.service}/{self.version}"

    @property
    def namespace(self) -> str:
        """Namespace of the request and response body."""
        return f"{SERVICE_NS_BASE}/{self.service}/{self.version}"

    def soap_action(self, action: Optional[str] = None) -> str:
        """SOAPAction header value for the default or a variant action."""
        return f"{self.namespace}/{action or self.request_element}"


@dataclass(frozen=True)
class FaultDescriptor:
    """Shape used to decode the structured body of a service fault.

    Attributes:
        release: Schema release of the operation
        namespace: Namespace of the ``serviceMessages`` element
    """

    release: str
    namespace: str


@dataclass(frozen=True)
class OperationDescriptor:
    """Immutable description of one registry operation.

    Attributes:
        key: Stable operation key
        label: Human-readable label
        surface: Entry surface the operation is reachable from
        mode: ``internalMode`` value selecting the operation on its surface
        identity_types: Concrete identity types of the operation's release
        binding: SOAP binding
        build_request: Builds the typed request from the input payload
        result_field: Local name of the response element holding the result
        classifier_family: Search variant family, None when not classified
    """

    key: str
    label: str
    surface: Surface
    mode: str
    identity_types: IdentityTypes
    binding: ServiceBinding
    build_request: Callable[[Mapping[str, Any]], Any]
    result_field: str
    classifier_family: Optional[ClassifierFamily] = None


def _fault(release: str) -> FaultDescriptor:
    return FaultDescriptor(release=release, namespace=f"{COMMON_CORE_NS_BASE}/{release}")


_DESCRIPTORS = (
    OperationDescriptor(
        key="ConsumerSearchIHI",
        label="IHI Inquiry Search (HI.06)",
        surface=Surface.CONSUMER,
        mode="1",
        identity_types=RELEASE_3,
        binding=ServiceBinding("ConsumerSearchIHI", "3.0", "searchIHI"),
        build_request=builders.build_search_ihi,
        result_field="searchIHIResult",
        classifier_family=PERSON_SEARCH,
    ),
    OperationDescriptor(
        key="ConsumerCreateProvisionalIHI",
        label="Create Provisional IHI (HI.10)",
        surface=Surface.CONSUMER,
        mode="2",
        identity_types=RELEASE_3,
        binding=ServiceBinding("ConsumerCreateProvisionalIHI", "3.0", "createProvisionalIHI"),
        build_request=builders.build_create_provisional_ihi,
        result_field="createProvisionalIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerCreateUnverifiedIHI",
        label="Create Unverified IHI (HI.11)",
        surface=Surface.CONSUMER,
        mode="3",
        identity_types=RELEASE_302,
        binding=ServiceBinding("ConsumerCreateUnverifiedIHI", "3.0.2", "createUnverifiedIHI"),
        build_request=builders.build_create_unverified_ihi,
        result_field="createUnverifiedIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerUpdateProvisionalIHI",
        label="Update Provisional IHI (HI.03)",
        surface=Surface.CONSUMER,
        mode="4",
        identity_types=RELEASE_3,
        binding=ServiceBinding("ConsumerUpdateProvisionalIHI", "3.0", "updateProvisionalIHI"),
        build_request=builders.build_update_provisional_ihi,
        result_field="updateProvisionalIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerUpdateIHI",
        label="Update IHI (HI.05)",
        surface=Surface.CONSUMER,
        mode="5",
        identity_types=RELEASE_32,
        binding=ServiceBinding("ConsumerUpdateIHI", "3.2.0", "updateIHI"),
        build_request=builders.build_update_ihi,
        result_field="updateIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerMergeProvisionalIHI",
        label="Resolve Provisional IHI, merge (HI.08)",
        surface=Surface.CONSUMER,
        mode="6",
        identity_types=RELEASE_3,
        binding=ServiceBinding("ConsumerMergeProvisionalIHI", "3.0", "mergeProvisionalIHI"),
        build_request=builders.build_merge_provisional_ihi,
        result_field="mergeProvisionalIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerResolveProvisionalIHI",
        label="Resolve Provisional IHI, create unverified (HI.09)",
        surface=Surface.CONSUMER,
        mode="7",
        identity_types=RELEASE_302,
        binding=ServiceBinding("ConsumerResolveProvisionalIHI", "3.0.2", "resolveProvisionalIHI"),
        build_request=builders.build_resolve_provisional_ihi,
        result_field="resolveProvisionalIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerNotifyDuplicateIHI",
        label="Notify Duplicate IHI (HI.24)",
        surface=Surface.CONSUMER,
        mode="8",
        identity_types=RELEASE_32,
        binding=ServiceBinding("ConsumerNotifyDuplicateIHI", "3.2.0", "notifyDuplicateIHI"),
        build_request=builders.build_notify_duplicate_ihi,
        result_field="notifyDuplicateIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerNotifyReplicaIHI",
        label="Notify Replica IHI (HI.25)",
        surface=Surface.CONSUMER,
        mode="9",
        identity_types=RELEASE_32,
        binding=ServiceBinding("ConsumerNotifyReplicaIHI", "3.2.0", "notifyReplicaIHI"),
        build_request=builders.build_notify_replica_ihi,
        result_field="notifyReplicaIHIResult",
    ),
    OperationDescriptor(
        key="ConsumerCreateVerifiedIHI",
        label="Create Verified IHI for newborns (HI.26)",
        surface=Surface.CONSUMER,
        mode="10",
        identity_types=RELEASE_40,
        binding=ServiceBinding("ConsumerCreateVerifiedIHI", "4.0", "createVerifiedIHI"),
        build_request=builders.build_create_verified_ihi,
        result_field="createVerifiedIHIResult",
    ),
    OperationDescriptor(
        key="ProviderSearchForProviderIndividual",
        label="Search for Provider Individual (HI.31)",
        surface=Surface.PROVIDER,
        mode="1",
        identity_types=RELEASE_50,
        binding=ServiceBinding("ProviderSearchForProviderIndividual", "5.0.0", "searchForProviderIndividual"),
        build_request=builders.build_search_for_provider_individual,
        result_field="searchForProviderIndividualResult",
        classifier_family=PROVIDER_INDIVIDUAL_SEARCH,
    ),
    OperationDescriptor(
        key="ProviderSearchHIProviderDirectoryForIndividual",
        label="Healthcare Provider Directory search for an individual (HI.17)",
        surface=Surface.PROVIDER,
        mode="2",
        identity_types=RELEASE_32,
        binding=ServiceBinding(
            "ProviderSearchHIProviderDirectoryForIndividual", "3.2.0", "searchHIProviderDirectoryForIndividual"
        ),
        build_request=builders.build_search_provider_directory_for_individual,
        result_field="searchHIProviderDirectoryForIndividualResult",
        classifier_family=PROVIDER_DIRECTORY_INDIVIDUAL_SEARCH,
    ),
    OperationDescriptor(
        key="ProviderSearchForProviderOrganisation",
        label="Search for Provider Organisation (HI.32)",
        surface=Surface.ORGANISATION,
        mode="1",
        identity_types=RELEASE_50,
        binding=ServiceBinding(
            "ProviderSearchForProviderOrganisation", "5.0.0", "searchForProviderOrganisation"
        ),
        build_request=builders.build_search_for_provider_organisation,
        result_field="searchForProviderOrganisationResult",
    ),
    OperationDescriptor(
        key="ProviderReadProviderOrganisation",
        label="Read Provider Organisation (HI.16)",
        surface=Surface.ORGANISATION,
        mode="2",
        identity_types=RELEASE_32,
        binding=ServiceBinding("ProviderReadProviderOrganisation", "3.2.0", "readProviderOrganisation"),
        build_request=builders.build_read_provider_organisation,
        result_field="readProviderOrganisationResult",
    ),
    OperationDescriptor(
        key="ProviderSearchHIProviderDirectoryForOrganisation",
        label="Healthcare Provider Directory search for an organisation (HI.18)",
        surface=Surface.ORGANISATION,
        mode="3",
        identity_types=RELEASE_32,
        binding=ServiceBinding(
            "ProviderSearchHIProviderDirectoryForOrganisation", "3.2.0", "searchHIProviderDirectoryForOrganisation"
        ),
        build_request=builders.build_search_provider_directory_for_organisation,
        result_field="searchHIProviderDirectoryForOrganisationResult",
        classifier_family=ORGANISATION_DIRECTORY_SEARCH,
    ),
)

OPERATIONS: Mapping[str, OperationDescriptor] = MappingProxyType(
    {descriptor.key: descriptor for descriptor in _DESCRIPTORS}
)

FAULT_DESCRIPTORS: Mapping[str, FaultDescriptor] = MappingProxyType(
    {descriptor.key: _fault(descriptor.identity_types.product.release) for descriptor in _DESCRIPTORS}
)

SURFACE_MODES: Mapping[Surface, Mapping[str, str]] = MappingProxyType(
    {
        surface: MappingProxyType(
            {d.mode: d.key for d in _DESCRIPTORS if d.surface == surface}
        )
        for surface in Surface
    }
)


def get_descriptor(key: str) -> OperationDescriptor:
    """Look up an operation by key.

    Raises:
        UnknownOperationError: If no operation is registered under ``key``
    """
    try:
        return OPERATIONS[key]
    except KeyError:
        raise UnknownOperationError(UNKNOWN_OPERATION_MESSAGE) from None


def resolve_mode(surface: Surface, mode: str) -> Optional[OperationDescriptor]:
    """Return the operation a surface maps ``mode`` to, or None."""
    key = SURFACE_MODES[surface].get(mode)
    return OPERATIONS[key] if key is not None else None


def get_fault_descriptor(key: str) -> Optional[FaultDescriptor]:
    """Fault-detail shape registered for an operation, if any."""
    return FAULT_DESCRIPTORS.get(key)
