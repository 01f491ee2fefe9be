"""Request models for the registry operations.

One dataclass per remote operation plus the shared sub-shapes they are built
from. Field names are snake_case; the wire name is the camelCase form unless a
field declares ``metadata={"xml": ...}``.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Sex(str, Enum):
    """Sex code."""

    MALE = "M"
    FEMALE = "F"
    INTERSEX = "I"
    NOT_STATED = "N"


class DateAccuracy(str, Enum):
    """Date of birth accuracy indicator (day, month, year: Accurate/Estimated)."""

    AAA = "AAA"
    AAE = "AAE"
    AEA = "AEA"
    AEE = "AEE"
    EAA = "EAA"
    EAE = "EAE"
    EEA = "EEA"
    EEE = "EEE"


class Medium(str, Enum):
    """Electronic communication medium."""

    EMAIL = "E"
    MOBILE = "M"


class Usage(str, Enum):
    """Electronic communication usage."""

    PERSONAL = "P"
    BUSINESS = "B"


class NameUsage(str, Enum):
    """Name usage."""

    LEGAL = "L"


class State(str, Enum):
    """Australian state or territory."""

    NSW = "NSW"
    QLD = "QLD"
    VIC = "VIC"
    SA = "SA"
    WA = "WA"
    TAS = "TAS"
    ACT = "ACT"
    NT = "NT"


class LinkSearchType(str, Enum):
    """Which linked organisations a read/search returns."""

    ALL = "All"


@dataclass
class ElectronicCommunication:
    """E-mail or mobile contact detail."""

    medium: Medium
    usage: Usage
    details: str
    preferred: Optional[bool] = None


@dataclass
class AustralianUnstructuredAddress:
    """Unstructured Australian street address."""

    address_line_one: Optional[str] = None
    address_line_two: Optional[str] = None
    suburb: Optional[str] = None
    postcode: Optional[str] = None
    state: Optional[State] = None


@dataclass
class Address:
    """Address wrapper as carried in address arrays."""

    australian_unstructured_street_address: AustralianUnstructuredAddress


@dataclass
class PersonName:
    """Name with usage, as carried by update requests."""

    family_name: Optional[str] = None
    given_name: Optional[list[str]] = None
    usage: NameUsage = NameUsage.LEGAL


@dataclass
class OrganisationDetails:
    """Organisation business identifiers."""

    australian_business_number: Optional[str] = None
    australian_company_number: Optional[str] = None


# Consumer (IHI) operations


@dataclass
class SearchIHIRequest:
    """IHI inquiry search (HI.06)."""

    ihi_number: Optional[str] = None
    medicare_card_number: Optional[str] = None
    medicare_irn: Optional[str] = field(default=None, metadata={"xml": "medicareIRN"})
    dva_file_number: Optional[str] = None
    family_name: Optional[str] = None
    given_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    sex: Optional[Sex] = None
    electronic_communication: Optional[ElectronicCommunication] = None
    australian_unstructured_street_address: Optional[AustralianUnstructuredAddress] = None


@dataclass
class CreateProvisionalIHIRequest:
    """Create provisional IHI (HI.10)."""

    family_name: Optional[str] = None
    given_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_accuracy_indicator: Optional[DateAccuracy] = None
    sex: Optional[Sex] = None


@dataclass
class CreateUnverifiedIHIRequest:
    """Create unverified IHI (HI.11)."""

    date_of_birth: Optional[date] = None
    date_of_birth_accuracy_indicator: Optional[DateAccuracy] = None
    sex: Optional[Sex] = None
    electronic_communication: Optional[list[ElectronicCommunication]] = None
    family_name: Optional[str] = None
    given_name: Optional[list[str]] = None
    address: Optional[list[Address]] = None


@dataclass
class UpdateProvisionalIHIRequest:
    """Update provisional IHI (HI.03)."""

    ihi_number: Optional[str] = None
    family_name: Optional[str] = None
    given_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_accuracy_indicator: Optional[DateAccuracy] = None
    sex: Optional[Sex] = None


@dataclass
class UpdateIHIRequest:
    """Update IHI (HI.05)."""

    ihi_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_accuracy_indicator: Optional[DateAccuracy] = None
    sex: Optional[Sex] = None
    electronic_communication: Optional[list[ElectronicCommunication]] = None
    name: Optional[list[PersonName]] = None
    address: Optional[list[Address]] = None


@dataclass
class MergeProvisionalIHIRequest:
    """Resolve provisional IHI by merging records (HI.08)."""

    ihi_number: Optional[list[str]] = None


@dataclass
class ResolveProvisionalIHIRequest:
    """Resolve provisional IHI by creating an unverified IHI (HI.09)."""

    ihi_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_accuracy_indicator: Optional[DateAccuracy] = None
    sex: Optional[Sex] = None
    electronic_communication: Optional[list[ElectronicCommunication]] = None
    family_name: Optional[str] = None
    given_name: Optional[list[str]] = None
    address: Optional[Address] = None


@dataclass
class NotifyDuplicateIHIRequest:
    """Notify the registry of duplicate IHIs (HI.24)."""

    ihi_number: Optional[list[str]] = None
    comment: Optional[str] = None


@dataclass
class NotifyReplicaIHIRequest:
    """Notify the registry of a replica IHI (HI.25)."""

    ihi_number: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class CreateVerifiedIHIRequest:
    """Create verified IHI for a newborn (HI.26)."""

    date_of_birth: Optional[date] = None
    date_of_birth_accuracy_indicator: Optional[DateAccuracy] = None
    sex: Optional[Sex] = None
    electronic_communication: Optional[list[ElectronicCommunication]] = None
    family_name: Optional[str] = None
    given_name: Optional[list[str]] = None
    address: Optional[Address] = None
    privacy_notification: bool = True


# Provider individual operations


@dataclass
class SearchForProviderIndividualRequest:
    """Search for provider individual details (HI.31)."""

    hpii_number: Optional[str] = None
    registration_id: Optional[str] = None
    family_name: Optional[str] = None
    given_name: Optional[list[str]] = None
    date_of_birth: Optional[date] = None
    sex: Optional[Sex] = None
    search_australian_address: Optional[AustralianUnstructuredAddress] = None


@dataclass
class SearchHIProviderDirectoryForIndividualRequest:
    """Provider directory search for an individual (HI.17)."""

    hpii_number: Optional[str] = None


# Provider organisation operations


@dataclass
class SearchForProviderOrganisationRequest:
    """Search for provider organisation details (HI.32)."""

    hpio_number: Optional[str] = None


@dataclass
class ReadProviderOrganisationRequest:
    """Read provider organisation details (HI.16)."""

    hpio_number: Optional[str] = None
    link_search_type: LinkSearchType = LinkSearchType.ALL


@dataclass
class SearchHIProviderDirectoryForOrganisationRequest:
    """Provider directory search for an organisation (HI.18)."""

    hpio_number: Optional[str] = None
    name: Optional[str] = None
    organisation_type: Optional[str] = None
    service_type: Optional[str] = None
    unit_type: Optional[str] = None
    organisation_details: Optional[OrganisationDetails] = None
    australian_address_criteria: Optional[AustralianUnstructuredAddress] = None
    link_search_type: LinkSearchType = LinkSearchType.ALL
