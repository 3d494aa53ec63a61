"""
Alert conditions.

Components:
    base: AbstractAlertCondition, AlertConditionType and parameter helpers
    types/: Built-in variants (field content value, message count)
    factory: AlertConditionFactory mapping type tags to classes
"""

from logalert.alerts.base import AbstractAlertCondition, AlertConditionType
from logalert.alerts.factory import AlertConditionFactory, DEFAULT_CONDITION_TYPES
from logalert.alerts.types import (
    FieldContentValueAlertCondition,
    MessageCountAlertCondition,
    ThresholdType,
)

__all__ = [
    "AbstractAlertCondition",
    "AlertConditionType",
    "AlertConditionFactory",
    "DEFAULT_CONDITION_TYPES",
    "FieldContentValueAlertCondition",
    "MessageCountAlertCondition",
    "ThresholdType",
]
