"""Client DRF serializers for API input.

The serializers operate at the Interface layer (API Views).  They
handle HTTP-level concerns: request parsing and field-level validation
(required fields, lengths, formats).  Business rules such as uniqueness
and country resolution live in the Service Layer, which receives the
Pydantic DTOs built from ``validated_data``.
"""

from __future__ import annotations

from django.core.validators import RegexValidator
from rest_framework import serializers

PHONE_VALIDATOR = RegexValidator(
    regex=r"^[+]?[0-9\s\-()]{7,20}$",
    message=(
        "Phone number must be valid (7-20 digits, may include +, spaces, "
        "hyphens, parentheses)"
    ),
)

COUNTRY_CODE_VALIDATOR = RegexValidator(
    regex=r"^[A-Za-z]{2}$",
    message="Country code must be a valid ISO 3166-1 alpha-2 code (2 letters)",
)


class _ContactFieldsSerializer(serializers.Serializer):
    """Fields shared by create and update: the mutable contact data."""

    email = serializers.EmailField(
        max_length=255,
        error_messages={"invalid": "Email must be a valid email address"},
    )
    address = serializers.CharField(min_length=5, max_length=500)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR])
    country_code = serializers.CharField(validators=[COUNTRY_CODE_VALIDATOR])


class CreateClientSerializer(_ContactFieldsSerializer):
    """POST /clients/ payload."""

    first_name = serializers.CharField(min_length=2, max_length=100)
    second_name = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True
    )
    first_surname = serializers.CharField(min_length=2, max_length=100)
    second_surname = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True
    )


class UpdateClientSerializer(_ContactFieldsSerializer):
    """PATCH /clients/{id}/ payload.

    Only email, address, phone and country_code are accepted; name fields
    sent by the client are ignored.
    """
