"""
Billing configuration.
Firm-wide defaults used when an invoice is created without explicit values.
"""
import json
from decimal import Decimal
from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from practice_ledger.core import money
from practice_ledger.core.errors import ConfigurationError


class BillingSettings(BaseModel):
    """Defaults for numbering, rates and payment terms"""
    number_prefix: str = Field(default='INV', min_length=1, max_length=10)
    default_tax_percentage: Decimal = Decimal('18.00')
    default_discount_percentage: Decimal = Decimal('0')
    default_payment_term_days: int = Field(default=15, ge=0)

    @field_validator('number_prefix')
    def validate_prefix(cls, v):
        # The prefix is the first dash-separated segment of every number
        if '-' in v or not v.isalnum():
            raise ValueError('Number prefix must be alphanumeric without dashes')
        return v.upper()

    @field_validator('default_tax_percentage', 'default_discount_percentage')
    def validate_rate(cls, v):
        return money.percentage(v)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'BillingSettings':
        """
        Load settings from a JSON file. Missing keys keep their defaults.

        Raises:
            ConfigurationError: if the file is unreadable or holds invalid values
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return cls(**data)
        except (OSError, json.JSONDecodeError, TypeError, PydanticValidationError) as e:
            raise ConfigurationError(f'Invalid billing settings in {path}: {e}') from e
