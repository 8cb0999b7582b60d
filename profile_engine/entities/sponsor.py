"""Sponsor (employer household) profile.

Three pages: contact and identity, household, consents. The salary
budget maximum is checked against the minimum read from the snapshot.
"""

from profile_engine.entities.base import build_profile
from profile_engine.services.field_validation import (
    at_least_field,
    e164_phone,
    length_between,
    numeric_range,
)
from profile_engine.services.form_types import ContactChannel, FieldSpec, PageSpec

FIELDS = (
    # Identity and contact
    FieldSpec(
        "full_name",
        required=True,
        group="personal",
        weight=2,
        label="Full name",
        validator=length_between(2, 100),
    ),
    FieldSpec(
        "phone",
        required=True,
        group="personal",
        weight=3,
        label="Phone number",
        validator=e164_phone(),
        verification=ContactChannel.PHONE,
    ),
    FieldSpec(
        "facePhoto", required=True, group="documents", weight=2, label="Face photo"
    ),
    FieldSpec(
        "idDocument",
        required=True,
        group="documents",
        weight=2,
        label="Emirates ID or passport",
    ),
    FieldSpec("country", required=True, group="personal"),
    FieldSpec("city", required=True, group="personal"),
    # Household
    FieldSpec(
        "familySize",
        required=True,
        group="household",
        label="Family size",
        validator=numeric_range(1, 30, integer=True),
    ),
    FieldSpec(
        "salaryBudgetMin",
        required=True,
        group="household",
        label="Minimum salary budget",
        validator=numeric_range(0),
    ),
    FieldSpec(
        "salaryBudgetMax",
        required=True,
        group="household",
        label="Maximum salary budget",
        validator=at_least_field(
            "salaryBudgetMin",
            message="Maximum budget must be at least the minimum budget",
        ),
    ),
    FieldSpec(
        "accommodationType",
        required=True,
        group="household",
        label="Accommodation type",
    ),
    # Consents
    FieldSpec(
        "termsAccepted", required=True, group="consents", label="Terms of service"
    ),
    FieldSpec(
        "privacyAccepted", required=True, group="consents", label="Privacy policy"
    ),
)

PAGES = (
    PageSpec(
        "identity",
        "Identity & Contact",
        {"full_name", "phone", "facePhoto", "idDocument", "country", "city"},
    ),
    PageSpec(
        "household",
        "Household",
        {"familySize", "salaryBudgetMin", "salaryBudgetMax", "accommodationType"},
    ),
    PageSpec(
        "consents",
        "Review & Consents",
        {"termsAccepted", "privacyAccepted"},
    ),
)

SPONSOR_PROFILE = build_profile("sponsor", FIELDS, PAGES)
