"""Domestic worker (maid) profile.

Four pages: personal details, contact and documents, work profile,
consents. Date of birth is entered as day/month/year parts; the
composite check lives on birthYear and reads the other two parts from
the snapshot. Age must fall within 21..55.

Optional fields carry weight 0 so that 100% means "every required field
complete".
"""

from datetime import date

from profile_engine.entities.base import build_profile
from profile_engine.services.field_validation import (
    composite_date,
    e164_phone,
    length_between,
    min_items,
    numeric_range,
)
from profile_engine.services.form_types import ContactChannel, FieldSpec, PageSpec

_MIN_AGE = 21
_MAX_AGE = 55
_THIS_YEAR = date.today().year

FIELDS = (
    # Personal
    FieldSpec(
        "full_name",
        required=True,
        group="personal",
        weight=2,
        label="Full name",
        validator=length_between(2, 100),
    ),
    FieldSpec("birthDay", required=True, group="personal", label="Birth day"),
    FieldSpec("birthMonth", required=True, group="personal", label="Birth month"),
    FieldSpec(
        "birthYear",
        required=True,
        group="personal",
        label="Birth year",
        validator=composite_date(
            "birthDay",
            "birthMonth",
            "birthYear",
            min_year=_THIS_YEAR - _MAX_AGE,
            max_year=_THIS_YEAR - _MIN_AGE,
        ),
    ),
    FieldSpec("nationality", required=True, group="personal", weight=2),
    FieldSpec("religion", group="personal", weight=0),
    FieldSpec("maritalStatus", group="personal", weight=0),
    # Contact and documents
    FieldSpec(
        "phone",
        required=True,
        group="contact",
        weight=3,
        label="Phone number",
        validator=e164_phone(),
        verification=ContactChannel.PHONE,
    ),
    FieldSpec("country", required=True, group="contact"),
    FieldSpec("city", required=True, group="contact"),
    FieldSpec(
        "facePhoto", required=True, group="documents", weight=3, label="Face photo"
    ),
    FieldSpec(
        "idDocument",
        required=True,
        group="documents",
        weight=3,
        label="Passport or national ID",
    ),
    # Work profile
    FieldSpec("primaryProfession", required=True, group="professional", weight=2),
    FieldSpec("visaStatus", required=True, group="professional"),
    FieldSpec(
        "skills",
        required=True,
        group="professional",
        weight=2,
        validator=min_items(1, message="Please select at least one skill"),
    ),
    FieldSpec(
        "languagesSpoken",
        required=True,
        group="professional",
        weight=2,
        label="Languages spoken",
        validator=min_items(1, message="Please select at least one language"),
    ),
    FieldSpec(
        "experienceYears",
        required=True,
        group="professional",
        weight=2,
        label="Years of experience",
        validator=numeric_range(
            0,
            50,
            integer=True,
            message="Experience must be between 0 and 50 years",
        ),
    ),
    FieldSpec(
        "salaryExpectation",
        group="professional",
        weight=0,
        label="Salary expectation",
        validator=numeric_range(
            1000,
            10000,
            message="Salary expectation must be between 1000 and 10000",
        ),
    ),
    FieldSpec("workPreferences", group="professional", weight=0),
    FieldSpec(
        "aboutMe",
        required=True,
        group="professional",
        weight=2,
        label="About me",
        validator=length_between(20, 500),
    ),
    # Consents
    FieldSpec(
        "termsAccepted", required=True, group="consents", label="Terms of service"
    ),
    FieldSpec(
        "privacyAccepted", required=True, group="consents", label="Privacy policy"
    ),
    FieldSpec(
        "profileSharingAccepted",
        required=True,
        group="consents",
        label="Profile sharing consent",
    ),
)

PAGES = (
    PageSpec(
        "personal",
        "Personal Information",
        {
            "full_name",
            "birthDay",
            "birthMonth",
            "birthYear",
            "nationality",
            "religion",
            "maritalStatus",
        },
    ),
    PageSpec(
        "contact",
        "Contact & Documents",
        {"phone", "country", "city", "facePhoto", "idDocument"},
    ),
    PageSpec(
        "professional",
        "Work Profile",
        {
            "primaryProfession",
            "visaStatus",
            "skills",
            "languagesSpoken",
            "experienceYears",
            "salaryExpectation",
            "workPreferences",
            "aboutMe",
        },
    ),
    PageSpec(
        "consents",
        "Review & Consents",
        {"termsAccepted", "privacyAccepted", "profileSharingAccepted"},
    ),
)

MAID_PROFILE = build_profile("maid", FIELDS, PAGES)
