"""Request construction from the caller's JSON payload.

Every builder takes the decoded payload (a mapping) and returns the typed
request for one registry operation. String fields are read only when present,
of JSON string type and not blank. Identifier numbers are prefixed with their
namespace qualifier.
"""

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..models.requests import (
    Address,
    AustralianUnstructuredAddress,
    CreateProvisionalIHIRequest,
    CreateUnverifiedIHIRequest,
    CreateVerifiedIHIRequest,
    DateAccuracy,
    ElectronicCommunication,
    Medium,
    MergeProvisionalIHIRequest,
    NotifyDuplicateIHIRequest,
    NotifyReplicaIHIRequest,
    OrganisationDetails,
    PersonName,
    ReadProviderOrganisationRequest,
    ResolveProvisionalIHIRequest,
    SearchForProviderIndividualRequest,
    SearchForProviderOrganisationRequest,
    SearchHIProviderDirectoryForIndividualRequest,
    SearchHIProviderDirectoryForOrganisationRequest,
    SearchIHIRequest,
    Sex,
    State,
    UpdateIHIRequest,
    UpdateProvisionalIHIRequest,
    Usage,
)

logger = logging.getLogger(__name__)

IHI_QUALIFIER = "http://ns.electronichealth.net.au/id/hi/ihi/1.0/"
HPII_QUALIFIER = "http://ns.electronichealth.net.au/id/hi/hpii/1.0/"
HPIO_QUALIFIER = "http://ns.electronichealth.net.au/id/hi/hpio/1.0/"

NAME_MAX_LENGTH = 40
COMMENT_MAX_LENGTH = 240
ORGANISATION_NAME_MAX_LENGTH = 200

# Business defaults sent when the caller supplies no date of birth or sex
DEFAULT_DATE_OF_BIRTH = date(2000, 1, 1)
DEFAULT_DATE_ACCURACY = DateAccuracy.EEE
SUPPLIED_DATE_ACCURACY = DateAccuracy.AAA
DEFAULT_SEX = Sex.NOT_STATED

STATE_NAMES = {
    "NEW SOUTH WALES": "NSW",
    "QUEENSLAND": "QLD",
    "VICTORIA": "VIC",
    "SOUTH AUSTRALIA": "SA",
    "WESTERN AUSTRALIA": "WA",
    "TASMANIA": "TAS",
    "AUSTRALIAN CAPITAL TERRITORY": "ACT",
    "NORTHERN TERRITORY": "NT",
}

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d %b %Y", "%d %B %Y")


def get_string_property(payload: Mapping[str, Any], name: str) -> Optional[str]:
    """Return a non-blank string property, or None.

    Example:
        >>> get_string_property({"familyNameField": "  "}, "familyNameField") is None
        True
    """
    value = payload.get(name)
    if isinstance(value, str) and value.strip():
        return value
    return None


def truncate(value: Optional[str], max_length: int) -> Optional[str]:
    """Cut a string to ``max_length`` characters; None stays None."""
    if value is not None and len(value) > max_length:
        return value[:max_length]
    return value


def qualified(value: Optional[str], qualifier: str) -> Optional[str]:
    """Prefix a non-blank value with its namespace qualifier."""
    if value is None or not value.strip():
        return None
    return qualifier + value


def get_qualified_string(payload: Mapping[str, Any], name: str, qualifier: str) -> Optional[str]:
    """Read a string property and prefix it with ``qualifier``."""
    return qualified(get_string_property(payload, name), qualifier)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a date of birth, returning None when it is not a valid date.

    Accepts ISO dates and date-times as well as ``31/01/1980`` and
    ``31 Jan 1980``.
    """
    if value is None:
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.debug(f"Ignoring unparseable date of birth: {value!r}")
    return None


def parse_sex(value: Optional[str]) -> Optional[Sex]:
    """Parse a sex code case-insensitively; invalid codes give None."""
    if value is None:
        return None
    try:
        return Sex(value.strip().upper())
    except ValueError:
        logger.debug(f"Ignoring unknown sex code: {value!r}")
        return None


def state_abbreviation(value: str) -> str:
    """Map a state name or abbreviation to its abbreviation (upper-case)."""
    normalized = value.strip().upper()
    return STATE_NAMES.get(normalized, normalized)


def get_date_of_birth(payload: Mapping[str, Any]) -> Optional[date]:
    return parse_date(get_string_property(payload, "dateOfBirthField"))


def get_sex(payload: Mapping[str, Any]) -> Optional[Sex]:
    return parse_sex(get_string_property(payload, "sexField"))


def get_electronic_communication(payload: Mapping[str, Any]) -> Optional[ElectronicCommunication]:
    """Build the contact detail: e-mail wins over mobile.

    Returns:
        ElectronicCommunication, or None when neither e-mail nor mobile is given
    """
    email = get_string_property(payload, "emailField")
    mobile = get_string_property(payload, "mobileField")
    preferred = get_string_property(payload, "preferredElectronicCommunicationField")

    if email is not None:
        medium, details = Medium.EMAIL, email
    elif mobile is not None:
        medium, details = Medium.MOBILE, mobile
    else:
        return None

    return ElectronicCommunication(
        medium=medium,
        usage=Usage.PERSONAL,
        details=details,
        preferred=True if preferred is not None and preferred.upper() == "Y" else None,
    )


def get_electronic_communications(payload: Mapping[str, Any]) -> Optional[list[ElectronicCommunication]]:
    ecomm = get_electronic_communication(payload)
    return [ecomm] if ecomm is not None else None


def get_australian_address(payload: Mapping[str, Any]) -> Optional[AustralianUnstructuredAddress]:
    """Build the unstructured street address from ``australianAddressField``.

    Only addresses whose ``countryField`` is AUSTRALIA (any case) are used.
    Unknown states are left out of the address.
    """
    address = payload.get("australianAddressField")
    if not isinstance(address, Mapping):
        return None
    country = address.get("countryField")
    if not isinstance(country, str) or country.strip().upper() != "AUSTRALIA":
        return None

    state = None
    state_value = address.get("stateField")
    if isinstance(state_value, str):
        try:
            state = State(state_abbreviation(state_value))
        except ValueError:
            logger.debug(f"Ignoring unknown state: {state_value!r}")

    return AustralianUnstructuredAddress(
        address_line_one=get_string_property(address, "addressLineOneField"),
        address_line_two=get_string_property(address, "addressLineTwoField"),
        suburb=get_string_property(address, "suburbField"),
        postcode=get_string_property(address, "postcodeField"),
        state=state,
    )


def get_address(payload: Mapping[str, Any]) -> Optional[Address]:
    unstructured = get_australian_address(payload)
    if unstructured is None:
        return None
    return Address(australian_unstructured_street_address=unstructured)


def get_addresses(payload: Mapping[str, Any]) -> Optional[list[Address]]:
    address = get_address(payload)
    return [address] if address is not None else None


def get_given_names(payload: Mapping[str, Any], max_length: Optional[int] = NAME_MAX_LENGTH) -> Optional[list[str]]:
    given = get_string_property(payload, "givenNameField")
    if given is None:
        return None
    return [truncate(given, max_length) if max_length else given]


def _family_name(payload: Mapping[str, Any]) -> Optional[str]:
    return truncate(get_string_property(payload, "familyNameField"), NAME_MAX_LENGTH)


def _given_name(payload: Mapping[str, Any]) -> Optional[str]:
    return truncate(get_string_property(payload, "givenNameField"), NAME_MAX_LENGTH)


def _birth_details(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Date of birth, accuracy and sex with the business defaults applied."""
    dob = get_date_of_birth(payload)
    return {
        "date_of_birth": dob or DEFAULT_DATE_OF_BIRTH,
        "date_of_birth_accuracy_indicator": SUPPLIED_DATE_ACCURACY if dob else DEFAULT_DATE_ACCURACY,
        "sex": get_sex(payload) or DEFAULT_SEX,
    }


# Consumer (IHI) operations


def build_search_ihi(payload: Mapping[str, Any]) -> SearchIHIRequest:
    return SearchIHIRequest(
        ihi_number=get_qualified_string(payload, "ihiNumberField", IHI_QUALIFIER),
        medicare_card_number=get_string_property(payload, "medicareCardNumberField"),
        medicare_irn=get_string_property(payload, "medicareIRNField"),
        dva_file_number=get_string_property(payload, "dvaFileNumberField"),
        family_name=_family_name(payload),
        given_name=_given_name(payload),
        date_of_birth=get_date_of_birth(payload),
        sex=get_sex(payload),
        electronic_communication=get_electronic_communication(payload),
        australian_unstructured_street_address=get_australian_address(payload),
    )


def build_create_provisional_ihi(payload: Mapping[str, Any]) -> CreateProvisionalIHIRequest:
    return CreateProvisionalIHIRequest(
        family_name=_family_name(payload),
        given_name=_given_name(payload),
        **_birth_details(payload),
    )


def build_create_unverified_ihi(payload: Mapping[str, Any]) -> CreateUnverifiedIHIRequest:
    return CreateUnverifiedIHIRequest(
        electronic_communication=get_electronic_communications(payload),
        family_name=_family_name(payload),
        given_name=get_given_names(payload),
        address=get_addresses(payload),
        **_birth_details(payload),
    )


def build_update_provisional_ihi(payload: Mapping[str, Any]) -> UpdateProvisionalIHIRequest:
    return UpdateProvisionalIHIRequest(
        ihi_number=get_qualified_string(payload, "ihiNumberField", IHI_QUALIFIER),
        family_name=_family_name(payload),
        given_name=_given_name(payload),
        **_birth_details(payload),
    )


def build_update_ihi(payload: Mapping[str, Any]) -> UpdateIHIRequest:
    """Update IHI sends a date of birth only when the caller supplies one."""
    dob = get_date_of_birth(payload)
    return UpdateIHIRequest(
        ihi_number=get_qualified_string(payload, "ihiNumberField", IHI_QUALIFIER),
        date_of_birth=dob,
        date_of_birth_accuracy_indicator=SUPPLIED_DATE_ACCURACY if dob else None,
        sex=get_sex(payload) or DEFAULT_SEX,
        electronic_communication=get_electronic_communications(payload),
        name=[PersonName(family_name=_family_name(payload), given_name=get_given_names(payload))],
        address=get_addresses(payload),
    )


def build_merge_provisional_ihi(payload: Mapping[str, Any]) -> MergeProvisionalIHIRequest:
    numbers = [
        get_qualified_string(payload, "ihiNumberField1", IHI_QUALIFIER),
        get_qualified_string(payload, "ihiNumberField2", IHI_QUALIFIER),
    ]
    return MergeProvisionalIHIRequest(ihi_number=[n for n in numbers if n is not None] or None)


def build_resolve_provisional_ihi(payload: Mapping[str, Any]) -> ResolveProvisionalIHIRequest:
    return ResolveProvisionalIHIRequest(
        ihi_number=get_qualified_string(payload, "ihiNumberField", IHI_QUALIFIER),
        electronic_communication=get_electronic_communications(payload),
        family_name=_family_name(payload),
        given_name=get_given_names(payload),
        address=get_address(payload),
        **_birth_details(payload),
    )


def build_notify_duplicate_ihi(payload: Mapping[str, Any]) -> NotifyDuplicateIHIRequest:
    """``ihiNumberField`` is an array here; blank and non-string entries are skipped."""
    raw = payload.get("ihiNumberField")
    numbers: list[str] = []
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, str):
                number = qualified(item, IHI_QUALIFIER)
                if number is not None:
                    numbers.append(number)
    return NotifyDuplicateIHIRequest(
        ihi_number=numbers or None,
        comment=truncate(get_string_property(payload, "comment"), COMMENT_MAX_LENGTH),
    )


def build_notify_replica_ihi(payload: Mapping[str, Any]) -> NotifyReplicaIHIRequest:
    return NotifyReplicaIHIRequest(
        ihi_number=get_qualified_string(payload, "ihiNumberField", IHI_QUALIFIER),
        comment=truncate(get_string_property(payload, "comment"), COMMENT_MAX_LENGTH),
    )


def build_create_verified_ihi(payload: Mapping[str, Any]) -> CreateVerifiedIHIRequest:
    return CreateVerifiedIHIRequest(
        electronic_communication=get_electronic_communications(payload),
        family_name=_family_name(payload),
        given_name=get_given_names(payload),
        address=get_address(payload),
        privacy_notification=True,
        **_birth_details(payload),
    )


# Provider individual operations


def build_search_for_provider_individual(payload: Mapping[str, Any]) -> SearchForProviderIndividualRequest:
    return SearchForProviderIndividualRequest(
        hpii_number=get_qualified_string(payload, "hpiiNumberField", HPII_QUALIFIER),
        registration_id=get_string_property(payload, "registrationIdField"),
        family_name=get_string_property(payload, "familyNameField"),
        given_name=get_given_names(payload, max_length=None),
        date_of_birth=get_date_of_birth(payload),
        sex=get_sex(payload),
        search_australian_address=get_australian_address(payload),
    )


def build_search_provider_directory_for_individual(
    payload: Mapping[str, Any],
) -> SearchHIProviderDirectoryForIndividualRequest:
    return SearchHIProviderDirectoryForIndividualRequest(
        hpii_number=get_qualified_string(payload, "hpiiNumberField", HPII_QUALIFIER),
    )


# Provider organisation operations


def build_search_for_provider_organisation(payload: Mapping[str, Any]) -> SearchForProviderOrganisationRequest:
    return SearchForProviderOrganisationRequest(
        hpio_number=get_qualified_string(payload, "hpioNumberField", HPIO_QUALIFIER),
    )


def build_read_provider_organisation(payload: Mapping[str, Any]) -> ReadProviderOrganisationRequest:
    return ReadProviderOrganisationRequest(
        hpio_number=get_qualified_string(payload, "hpioNumberField", HPIO_QUALIFIER),
    )


def _organisation_details(payload: Mapping[str, Any]) -> Optional[OrganisationDetails]:
    details = payload.get("organisationDetailsField")
    if not isinstance(details, Mapping):
        return None
    abn = get_string_property(details, "australianBusinessNumberField")
    acn = get_string_property(details, "australianCompanyNumberField")
    if abn is None and acn is None:
        return None
    return OrganisationDetails(australian_business_number=abn, australian_company_number=acn)


def build_search_provider_directory_for_organisation(
    payload: Mapping[str, Any],
) -> SearchHIProviderDirectoryForOrganisationRequest:
    return SearchHIProviderDirectoryForOrganisationRequest(
        hpio_number=get_qualified_string(payload, "hpioNumberField", HPIO_QUALIFIER),
        name=truncate(get_string_property(payload, "nameField"), ORGANISATION_NAME_MAX_LENGTH),
        organisation_type=get_string_property(payload, "organisationTypeField"),
        service_type=get_string_property(payload, "serviceTypeField"),
        unit_type=get_string_property(payload, "unitTypeField"),
        organisation_details=_organisation_details(payload),
        australian_address_criteria=get_australian_address(payload),
    )
