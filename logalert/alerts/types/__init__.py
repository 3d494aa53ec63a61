"""Built-in alert condition variants."""

from logalert.alerts.types.field_content import FieldContentValueAlertCondition
from logalert.alerts.types.message_count import MessageCountAlertCondition, ThresholdType

__all__ = [
    "FieldContentValueAlertCondition",
    "MessageCountAlertCondition",
    "ThresholdType",
]
