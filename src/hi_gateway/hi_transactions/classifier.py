"""Search variant classification.

The registry accepts exactly one search mode per call. Each classifier family
is an ordered list of variants; the first variant whose predicate matches is
chosen and every field outside that variant is cleared on a copy of the
request.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..models.requests import (
    Medium,
    SearchForProviderIndividualRequest,
    SearchHIProviderDirectoryForIndividualRequest,
    SearchHIProviderDirectoryForOrganisationRequest,
    SearchIHIRequest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchVariant:
    """One mutually exclusive way of populating a search request.

    Attributes:
        name: Variant name reported in logs
        predicate: Returns True when the request carries this variant's criteria
        clears: Request fields reset to None when this variant is chosen
        action: Remote action invoked for this variant, None for the
            operation's default action
    """

    name: str
    predicate: Callable[[Any], bool]
    clears: tuple[str, ...]
    action: Optional[str] = None


@dataclass(frozen=True)
class ClassifierFamily:
    """Ordered variant list for one operation family.

    Attributes:
        name: Family name
        request_type: Request dataclass the family classifies
        variants: Variants in precedence order
        failure_message: Reason reported when no variant matches
    """

    name: str
    request_type: type
    variants: tuple[SearchVariant, ...]
    failure_message: str


def minimum_criteria_message(identifier: str) -> str:
    """Reason used when a request matches no variant."""
    return (
        f"The {identifier} search request does not contain the minimum search criteria. "
        "Please check all input fields and resubmit."
    )


def _detailed_search(request: SearchIHIRequest) -> bool:
    ecomm = request.electronic_communication
    if ecomm is None or request.family_name is None:
        return False
    return request.given_name is not None or ecomm.medium == Medium.MOBILE


PERSON_SEARCH = ClassifierFamily(
    name="person-identifier search",
    request_type=SearchIHIRequest,
    variants=(
        SearchVariant(
            name="BasicMedicareSearch",
            predicate=lambda r: r.medicare_card_number is not None,
            clears=(
                "ihi_number",
                "dva_file_number",
                "electronic_communication",
                "australian_unstructured_street_address",
            ),
            action="basicMedicareSearch",
        ),
        SearchVariant(
            name="BasicDvaSearch",
            predicate=lambda r: r.dva_file_number is not None,
            clears=(
                "ihi_number",
                "medicare_card_number",
                "medicare_irn",
                "electronic_communication",
                "australian_unstructured_street_address",
            ),
            action="basicDvaSearch",
        ),
        SearchVariant(
            name="BasicSearch",
            predicate=lambda r: r.ihi_number is not None,
            clears=(
                "medicare_card_number",
                "medicare_irn",
                "dva_file_number",
                "electronic_communication",
                "australian_unstructured_street_address",
            ),
            action="basicSearch",
        ),
        SearchVariant(
            name="AustralianUnstructuredAddressSearch",
            predicate=lambda r: (
                r.australian_unstructured_street_address is not None
                and r.family_name is not None
                and r.given_name is not None
            ),
            clears=(
                "ihi_number",
                "medicare_card_number",
                "medicare_irn",
                "dva_file_number",
                "electronic_communication",
            ),
            action="australianUnstructuredAddressSearch",
        ),
        SearchVariant(
            name="DetailedSearch",
            predicate=_detailed_search,
            clears=(
                "ihi_number",
                "medicare_card_number",
                "medicare_irn",
                "dva_file_number",
                "australian_unstructured_street_address",
            ),
            action="detailedSearch",
        ),
    ),
    failure_message=minimum_criteria_message("IHI"),
)

PROVIDER_INDIVIDUAL_SEARCH = ClassifierFamily(
    name="provider-individual search",
    request_type=SearchForProviderIndividualRequest,
    variants=(
        SearchVariant(
            name="HpiiSearch",
            predicate=lambda r: r.hpii_number is not None,
            clears=("registration_id", "search_australian_address"),
        ),
        SearchVariant(
            name="RegistrationIdSearch",
            predicate=lambda r: r.registration_id is not None,
            clears=("hpii_number", "search_australian_address"),
        ),
        SearchVariant(
            name="DemographicSearch",
            predicate=lambda r: r.family_name is not None,
            clears=("hpii_number", "registration_id"),
        ),
    ),
    failure_message=minimum_criteria_message("HPII"),
)

PROVIDER_DIRECTORY_INDIVIDUAL_SEARCH = ClassifierFamily(
    name="provider-directory individual search",
    request_type=SearchHIProviderDirectoryForIndividualRequest,
    variants=(
        SearchVariant(
            name="IdentifierSearch",
            predicate=lambda r: r.hpii_number is not None,
            clears=(),
        ),
    ),
    failure_message=minimum_criteria_message("HPII"),
)

# Name-only search is selected here but the registry may not fully honour it.
ORGANISATION_DIRECTORY_SEARCH = ClassifierFamily(
    name="provider-organisation directory search",
    request_type=SearchHIProviderDirectoryForOrganisationRequest,
    variants=(
        SearchVariant(
            name="OrganisationIdentifierSearch",
            predicate=lambda r: r.hpio_number is not None,
            clears=(
                "name",
                "organisation_type",
                "service_type",
                "unit_type",
                "organisation_details",
                "australian_address_criteria",
            ),
        ),
        SearchVariant(
            name="OrganisationNameSearch",
            predicate=lambda r: r.name is not None,
            clears=("hpio_number",),
        ),
    ),
    failure_message=minimum_criteria_message("HPIO"),
)


def select_variant(family: ClassifierFamily, request: Any) -> Optional[SearchVariant]:
    """Return the first variant whose predicate matches, without clearing."""
    for variant in family.variants:
        if variant.predicate(request):
            return variant
    return None


def classify(family: ClassifierFamily, request: Any) -> Optional[tuple[SearchVariant, Any]]:
    """Select the search variant for a request and clear unrelated fields.

    The input request is not modified; the cleared request is a copy.

    Args:
        family: Classifier family for the request's operation
        request: Populated request of ``family.request_type``

    Returns:
        (variant, cleared_request), or None when no variant matches

    Raises:
        TypeError: If the request is not of the family's request type

    Example:
        >>> variant, cleared = classify(PERSON_SEARCH, SearchIHIRequest(medicare_card_number="2950"))
        >>> variant.name
        'BasicMedicareSearch'
    """
    if not isinstance(request, family.request_type):
        raise TypeError(
            f"{family.name} classifies {family.request_type.__name__}, "
            f"got {type(request).__name__}"
        )

    variant = select_variant(family, request)
    if variant is None:
        logger.info(f"No {family.name} variant matches the request")
        return None

    cleared = dataclasses.replace(request, **{name: None for name in variant.clears})
    logger.debug(f"{family.name}: selected {variant.name}, cleared {', '.join(variant.clears) or 'nothing'}")
    return variant, cleared
