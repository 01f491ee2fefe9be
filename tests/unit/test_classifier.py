"""Unit tests for search variant classification."""

from datetime import date

import pytest

from hi_gateway.hi_transactions.classifier import (
    ORGANISATION_DIRECTORY_SEARCH,
    PERSON_SEARCH,
    PROVIDER_DIRECTORY_INDIVIDUAL_SEARCH,
    PROVIDER_INDIVIDUAL_SEARCH,
    classify,
    minimum_criteria_message,
    select_variant,
)
from hi_gateway.models.requests import (
    AustralianUnstructuredAddress,
    ElectronicCommunication,
    Medium,
    SearchForProviderIndividualRequest,
    SearchHIProviderDirectoryForIndividualRequest,
    SearchHIProviderDirectoryForOrganisationRequest,
    SearchIHIRequest,
    Sex,
    State,
    Usage,
)

IHI = "http://ns.electronichealth.net.au/id/hi/ihi/1.0/8003608166690503"


def _email() -> ElectronicCommunication:
    return ElectronicCommunication(Medium.EMAIL, Usage.PERSONAL, "jane@example.com")


def _mobile() -> ElectronicCommunication:
    return ElectronicCommunication(Medium.MOBILE, Usage.PERSONAL, "0400000000")


def _address() -> AustralianUnstructuredAddress:
    return AustralianUnstructuredAddress(
        address_line_one="1 Main St", suburb="Sydney", postcode="2000", state=State.NSW
    )


class TestPersonSearch:
    """Test IHI search variant precedence and clearing."""

    def test_medicare_wins_over_everything(self):
        """Test a Medicare number selects BasicMedicareSearch and clears the rest."""
        # Arrange
        request = SearchIHIRequest(
            ihi_number=IHI,
            medicare_card_number="2950141861",
            medicare_irn="1",
            dva_file_number="NX901667",
            family_name="Citizen",
            given_name="Jane",
            date_of_birth=date(1980, 1, 31),
            sex=Sex.FEMALE,
            electronic_communication=_email(),
            australian_unstructured_street_address=_address(),
        )

        # Act
        variant, cleared = classify(PERSON_SEARCH, request)

        # Assert
        assert variant.name == "BasicMedicareSearch"
        assert variant.action == "basicMedicareSearch"
        assert cleared.medicare_card_number == "2950141861"
        assert cleared.medicare_irn == "1"
        assert cleared.ihi_number is None
        assert cleared.dva_file_number is None
        assert cleared.electronic_communication is None
        assert cleared.australian_unstructured_street_address is None
        assert cleared.family_name == "Citizen"
        assert cleared.date_of_birth == date(1980, 1, 31)

    def test_dva_search(self):
        """Test a DVA file number without Medicare selects BasicDvaSearch."""
        request = SearchIHIRequest(ihi_number=IHI, dva_file_number="NX901667", medicare_irn="1")

        variant, cleared = classify(PERSON_SEARCH, request)

        assert variant.name == "BasicDvaSearch"
        assert cleared.ihi_number is None
        assert cleared.medicare_irn is None
        assert cleared.dva_file_number == "NX901667"

    def test_ihi_search(self):
        """Test an IHI number alone selects BasicSearch."""
        request = SearchIHIRequest(ihi_number=IHI, electronic_communication=_email())

        variant, cleared = classify(PERSON_SEARCH, request)

        assert variant.name == "BasicSearch"
        assert variant.action == "basicSearch"
        assert cleared.ihi_number == IHI
        assert cleared.electronic_communication is None

    def test_address_search_needs_both_names(self):
        """Test the address variant requires family and given name."""
        with_names = SearchIHIRequest(
            family_name="Citizen",
            given_name="Jane",
            australian_unstructured_street_address=_address(),
            electronic_communication=_email(),
        )
        family_only = SearchIHIRequest(
            family_name="Citizen",
            australian_unstructured_street_address=_address(),
        )

        variant, cleared = classify(PERSON_SEARCH, with_names)

        assert variant.name == "AustralianUnstructuredAddressSearch"
        assert cleared.electronic_communication is None
        assert cleared.australian_unstructured_street_address == _address()
        assert classify(PERSON_SEARCH, family_only) is None

    def test_detailed_search_with_given_name(self):
        """Test contact details plus both names select DetailedSearch."""
        request = SearchIHIRequest(
            family_name="Citizen", given_name="Jane", electronic_communication=_email()
        )

        variant, cleared = classify(PERSON_SEARCH, request)

        assert variant.name == "DetailedSearch"
        assert variant.action == "detailedSearch"
        assert cleared.electronic_communication == _email()

    def test_detailed_search_mobile_without_given_name(self):
        """Test a mobile number allows DetailedSearch without a given name."""
        mobile = SearchIHIRequest(family_name="Citizen", electronic_communication=_mobile())
        email = SearchIHIRequest(family_name="Citizen", electronic_communication=_email())

        assert select_variant(PERSON_SEARCH, mobile).name == "DetailedSearch"
        assert select_variant(PERSON_SEARCH, email) is None

    def test_no_criteria(self):
        """Test demographics alone match no variant."""
        request = SearchIHIRequest(family_name="Citizen", given_name="Jane", sex=Sex.FEMALE)

        assert classify(PERSON_SEARCH, request) is None

    def test_input_not_modified(self):
        """Test clearing works on a copy."""
        request = SearchIHIRequest(ihi_number=IHI, medicare_card_number="2950141861")

        classify(PERSON_SEARCH, request)

        assert request.ihi_number == IHI

    def test_idempotent(self):
        """Test classifying a cleared request selects the same variant and changes nothing."""
        request = SearchIHIRequest(
            ihi_number=IHI, dva_file_number="NX901667", electronic_communication=_email()
        )

        variant, cleared = classify(PERSON_SEARCH, request)
        again_variant, again = classify(PERSON_SEARCH, cleared)

        assert again_variant == variant
        assert again == cleared

    def test_wrong_request_type(self):
        """Test a request of another operation raises TypeError."""
        with pytest.raises(TypeError) as exc_info:
            classify(PERSON_SEARCH, SearchForProviderIndividualRequest())

        assert "SearchIHIRequest" in str(exc_info.value)


class TestProviderIndividualSearch:
    """Test provider individual search variants."""

    def test_hpii_wins(self):
        """Test an HPI-I number clears registration id and address."""
        request = SearchForProviderIndividualRequest(
            hpii_number="8003611566712356",
            registration_id="MED0000932508",
            family_name="Jones",
            search_australian_address=_address(),
        )

        variant, cleared = classify(PROVIDER_INDIVIDUAL_SEARCH, request)

        assert variant.name == "HpiiSearch"
        assert variant.action is None
        assert cleared.registration_id is None
        assert cleared.search_australian_address is None
        assert cleared.family_name == "Jones"

    def test_registration_id(self):
        request = SearchForProviderIndividualRequest(registration_id="MED0000932508")

        variant, _ = classify(PROVIDER_INDIVIDUAL_SEARCH, request)

        assert variant.name == "RegistrationIdSearch"

    def test_demographic(self):
        """Test family name alone selects the demographic search."""
        request = SearchForProviderIndividualRequest(family_name="Jones", search_australian_address=_address())

        variant, cleared = classify(PROVIDER_INDIVIDUAL_SEARCH, request)

        assert variant.name == "DemographicSearch"
        assert cleared.search_australian_address == _address()

    def test_no_criteria(self):
        assert classify(PROVIDER_INDIVIDUAL_SEARCH, SearchForProviderIndividualRequest(sex=Sex.MALE)) is None


class TestProviderDirectorySearches:
    """Test provider directory variants."""

    def test_individual_requires_hpii(self):
        assert classify(PROVIDER_DIRECTORY_INDIVIDUAL_SEARCH, SearchHIProviderDirectoryForIndividualRequest()) is None

        variant, _ = classify(
            PROVIDER_DIRECTORY_INDIVIDUAL_SEARCH,
            SearchHIProviderDirectoryForIndividualRequest(hpii_number="8003611566712356"),
        )
        assert variant.name == "IdentifierSearch"

    def test_organisation_identifier_clears_name_criteria(self):
        """Test an HPI-O number clears every name search field."""
        request = SearchHIProviderDirectoryForOrganisationRequest(
            hpio_number="8003620833337558",
            name="Better Clinics",
            service_type="GP",
            australian_address_criteria=_address(),
        )

        variant, cleared = classify(ORGANISATION_DIRECTORY_SEARCH, request)

        assert variant.name == "OrganisationIdentifierSearch"
        assert cleared.name is None
        assert cleared.service_type is None
        assert cleared.australian_address_criteria is None
        assert cleared.hpio_number == "8003620833337558"

    def test_organisation_name(self):
        """Test a name without an HPI-O selects the name search."""
        request = SearchHIProviderDirectoryForOrganisationRequest(name="Better Clinics", unit_type="Ward")

        variant, cleared = classify(ORGANISATION_DIRECTORY_SEARCH, request)

        assert variant.name == "OrganisationNameSearch"
        assert cleared.unit_type == "Ward"

    def test_organisation_no_criteria(self):
        request = SearchHIProviderDirectoryForOrganisationRequest(service_type="GP")

        assert classify(ORGANISATION_DIRECTORY_SEARCH, request) is None


class TestFailureMessages:
    """Test minimum criteria messages."""

    def test_message_names_identifier(self):
        assert PERSON_SEARCH.failure_message == minimum_criteria_message("IHI")
        assert "HPIO search request does not contain the minimum search criteria" in (
            ORGANISATION_DIRECTORY_SEARCH.failure_message
        )
