"""Validation services: rule engine, cross-field checks and pipeline."""

from .custom_rules import CustomRuleRegistry, CustomPredicate
from .cross_field import (
    CrossFieldCheck,
    DateRangeCheck,
    ConditionalRequiredCheck,
    NumericRelationshipCheck,
    PercentageTotalCheck,
)
from .business_rule_engine import BusinessRuleEngine
from .validation_pipeline import ValidationPipeline, ReferenceCheck

__all__ = [
    "CustomRuleRegistry",
    "CustomPredicate",
    "CrossFieldCheck",
    "DateRangeCheck",
    "ConditionalRequiredCheck",
    "NumericRelationshipCheck",
    "PercentageTotalCheck",
    "BusinessRuleEngine",
    "ValidationPipeline",
    "ReferenceCheck",
]
