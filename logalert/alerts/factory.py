"""
Alert condition factory.

Maps condition type tags to condition classes and builds conditions from
persisted parameters. The search backend and the check interval are bound
once, when the factory is created, and handed to every condition.

Example:
    >>> factory = AlertConditionFactory(search_backend=backend, alert_check_interval=60)
    >>> condition = factory.create(
    ...     condition_type="field_content_value",
    ...     stream=stream,
    ...     id="c1",
    ...     created_at=utc_now(),
    ...     creator_user_id="admin",
    ...     parameters={"field": "level", "value": "error"},
    ... )
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import structlog

from logalert.alerts.base import AbstractAlertCondition, AlertConditionType
from logalert.alerts.types import (
    FieldContentValueAlertCondition,
    MessageCountAlertCondition,
)
from logalert.exceptions import UnknownAlertConditionTypeError
from logalert.interfaces.search_backend import SearchBackend
from logalert.models.streams import Stream
from logalert.models.timeranges import utc_now

logger = structlog.get_logger(__name__)

DEFAULT_CONDITION_TYPES: Dict[str, Type[AbstractAlertCondition]] = {
    AlertConditionType.FIELD_CONTENT_VALUE.value: FieldContentValueAlertCondition,
    AlertConditionType.MESSAGE_COUNT.value: MessageCountAlertCondition,
}


class AlertConditionFactory:
    """
    Builds alert conditions from their type tag and parameters.

    Attributes:
        search_backend: Backend handed to every condition.
        alert_check_interval: Check interval in seconds handed to every condition.
    """

    def __init__(
        self,
        search_backend: SearchBackend,
        alert_check_interval: int,
        condition_types: Optional[Mapping[str, Type[AbstractAlertCondition]]] = None,
    ) -> None:
        self.search_backend = search_backend
        self.alert_check_interval = alert_check_interval
        self._types: Dict[str, Type[AbstractAlertCondition]] = dict(
            DEFAULT_CONDITION_TYPES if condition_types is None else condition_types
        )

    def register(
        self,
        condition_type: Union[str, AlertConditionType],
        condition_class: Type[AbstractAlertCondition],
    ) -> None:
        """
        Register a condition class for a type tag.

        Raises:
            ValueError: If the tag is already registered.
        """
        tag = _tag(condition_type)
        if tag in self._types:
            raise ValueError(f"Alert condition type <{tag}> is already registered")
        self._types[tag] = condition_class
        logger.debug("alert_condition_type_registered", condition_type=tag)

    @property
    def available_types(self) -> List[str]:
        return list(self._types.keys())

    def create(
        self,
        condition_type: Union[str, AlertConditionType],
        stream: Stream,
        id: Optional[str],
        creator_user_id: str,
        parameters: Mapping[str, Any],
        created_at: Optional[datetime] = None,
    ) -> AbstractAlertCondition:
        """
        Build a condition.

        Raises:
            UnknownAlertConditionTypeError: If no class is registered for the tag.
            AlertConditionValidationError: If the parameters are invalid.
        """
        tag = _tag(condition_type)
        condition_class = self._types.get(tag)
        if condition_class is None:
            raise UnknownAlertConditionTypeError(tag)

        return condition_class(
            search_backend=self.search_backend,
            alert_check_interval=self.alert_check_interval,
            stream=stream,
            id=id,
            created_at=created_at or utc_now(),
            creator_user_id=creator_user_id,
            parameters=parameters,
        )


def _tag(condition_type: Union[str, AlertConditionType]) -> str:
    if isinstance(condition_type, AlertConditionType):
        return condition_type.value
    return str(condition_type).lower()
