"""Recruitment agency profile.

Three pages: agency details, authorized person, documents and services.
Agency drafts are long-form and use the long auto-save window. Four
contact fields require verification: the agency phone and email and the
authorized person's phone and email.
"""

from profile_engine.entities.base import build_profile
from profile_engine.services.field_validation import (
    e164_phone,
    email_address,
    iso_date,
    length_between,
    min_items,
    time_of_day,
    web_url,
)
from profile_engine.services.form_types import ContactChannel, FieldSpec, PageSpec

ABOUT_MIN_LENGTH = 300

FIELDS = (
    # Agency details
    FieldSpec("logoFile", group="branding", weight=0, label="Agency logo"),
    FieldSpec(
        "agencyName",
        required=True,
        group="agency",
        weight=2,
        label="Agency name",
        validator=length_between(2, 150),
    ),
    FieldSpec(
        "tradeLicenseNumber",
        required=True,
        group="agency",
        weight=2,
        label="Trade license number",
    ),
    FieldSpec(
        "countryOfRegistration",
        required=True,
        group="agency",
        label="Country of registration",
    ),
    FieldSpec(
        "operatingCities",
        required=True,
        group="agency",
        label="Operating cities",
        validator=min_items(1, message="Please select at least one city"),
    ),
    FieldSpec(
        "headOfficeAddress",
        required=True,
        group="agency",
        label="Head office address",
    ),
    FieldSpec(
        "contactPhone",
        required=True,
        group="contact",
        weight=3,
        label="Contact phone",
        validator=e164_phone(),
        verification=ContactChannel.PHONE,
    ),
    FieldSpec(
        "officialEmail",
        required=True,
        group="contact",
        weight=3,
        label="Official email",
        validator=email_address(),
        verification=ContactChannel.EMAIL,
    ),
    FieldSpec("website", group="contact", weight=0, validator=web_url()),
    FieldSpec(
        "licenseExpiryDate",
        required=True,
        group="agency",
        label="License expiry date",
        validator=iso_date(min_year=2000, max_year=2100),
    ),
    # Authorized person
    FieldSpec(
        "authorizedPersonName",
        required=True,
        group="authorized_person",
        weight=2,
        label="Authorized person name",
    ),
    FieldSpec(
        "authorizedPersonPosition",
        required=True,
        group="authorized_person",
        label="Authorized person position",
    ),
    FieldSpec(
        "authorizedPersonPhone",
        required=True,
        group="authorized_person",
        weight=3,
        label="Authorized person phone",
        validator=e164_phone(),
        verification=ContactChannel.PHONE,
    ),
    FieldSpec(
        "authorizedPersonEmail",
        required=True,
        group="authorized_person",
        weight=3,
        label="Authorized person email",
        validator=email_address(),
        verification=ContactChannel.EMAIL,
    ),
    FieldSpec(
        "authorizedPersonIdNumber",
        required=True,
        group="authorized_person",
        label="Authorized person ID number",
    ),
    # Documents and services
    FieldSpec(
        "authorizedPersonIdDocument",
        required=True,
        group="documents",
        weight=2,
        label="Authorized person ID (front)",
    ),
    FieldSpec(
        "authorizedPersonIdBackDocument",
        required=True,
        group="documents",
        weight=2,
        label="Authorized person ID (back)",
    ),
    FieldSpec(
        "tradeLicenseDocument",
        required=True,
        group="documents",
        weight=3,
        label="Trade license document",
    ),
    FieldSpec(
        "aboutAgency",
        required=True,
        group="services",
        weight=2,
        label="About the agency",
        validator=length_between(ABOUT_MIN_LENGTH, 5000),
    ),
    FieldSpec(
        "servicesOffered",
        required=True,
        group="services",
        label="Services offered",
        validator=min_items(1, message="Please select at least one service"),
    ),
    FieldSpec(
        "supportHoursStart",
        required=True,
        group="services",
        label="Support hours start",
        validator=time_of_day(),
    ),
    FieldSpec(
        "supportHoursEnd",
        required=True,
        group="services",
        label="Support hours end",
        validator=time_of_day(),
    ),
)

PAGES = (
    PageSpec(
        "agency",
        "Agency Details",
        {
            "logoFile",
            "agencyName",
            "tradeLicenseNumber",
            "countryOfRegistration",
            "operatingCities",
            "headOfficeAddress",
            "contactPhone",
            "officialEmail",
            "website",
            "licenseExpiryDate",
        },
    ),
    PageSpec(
        "authorized_person",
        "Authorized Person",
        {
            "authorizedPersonName",
            "authorizedPersonPosition",
            "authorizedPersonPhone",
            "authorizedPersonEmail",
            "authorizedPersonIdNumber",
        },
    ),
    PageSpec(
        "documents",
        "Documents & Services",
        {
            "authorizedPersonIdDocument",
            "authorizedPersonIdBackDocument",
            "tradeLicenseDocument",
            "aboutAgency",
            "servicesOffered",
            "supportHoursStart",
            "supportHoursEnd",
        },
    ),
)

AGENCY_PROFILE = build_profile("agency", FIELDS, PAGES, long_form=True)
