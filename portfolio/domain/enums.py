"""Domain enumerations for the portfolio workflow service.

Initiative fields (status, priority, ...) and the closed tag sets of the
workflow engine (triggers, condition kinds, action kinds). Values match the
strings stored in persisted configuration.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class Status(_ValuesMixin, str, Enum):
    """Initiative lifecycle status."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    AT_RISK = "At Risk"
    DONE = "Done"
    OBSOLETE = "Obsolete"


class Priority(_ValuesMixin, str, Enum):
    """Initiative priority (P0 highest)."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"


class WorkType(_ValuesMixin, str, Enum):
    PLANNED = "Planned Work"
    UNPLANNED = "Unplanned Work"


class InitiativeType(_ValuesMixin, str, Enum):
    WP = "WP"
    BAU = "BAU"


class AssetClass(_ValuesMixin, str, Enum):
    """Top-level (L1) asset class an initiative belongs to."""

    PL = "PL"
    AUTO = "Auto"
    POS = "POS"
    ADVISORY = "Advisory"


class WorkflowTrigger(_ValuesMixin, str, Enum):
    """When a workflow should run. Opaque to the engine; used by dispatchers."""

    ON_SCHEDULE = "on_schedule"
    ON_FIELD_CHANGE = "on_field_change"
    ON_STATUS_CHANGE = "on_status_change"
    ON_ETA_CHANGE = "on_eta_change"
    ON_EFFORT_CHANGE = "on_effort_change"
    ON_CONDITION_MET = "on_condition_met"
    ON_CREATE = "on_create"


class ConditionType(_ValuesMixin, str, Enum):
    """Condition tree node kinds (leaves and the and/or combinators)."""

    DUE_DATE_PASSED = "due_date_passed"
    DUE_DATE_WITHIN_DAYS = "due_date_within_days"
    LAST_UPDATED_OLDER_THAN = "last_updated_older_than"
    STATUS_EQUALS = "status_equals"
    STATUS_NOT_EQUALS = "status_not_equals"
    ACTUAL_EFFORT_GREATER_THAN = "actual_effort_greater_than"
    ACTUAL_EFFORT_PERCENTAGE_OF_ESTIMATED = "actual_effort_percentage"
    EFFORT_VARIANCE_EXCEEDS = "effort_variance_exceeds"
    PRIORITY_EQUALS = "priority_equals"
    RISK_ACTION_LOG_EMPTY = "risk_action_log_empty"
    OWNER_EQUALS = "owner_equals"
    ASSET_CLASS_EQUALS = "asset_class_equals"
    AND = "and"
    OR = "or"


class ActionType(_ValuesMixin, str, Enum):
    """Action tree node kinds (leaf mutators and the execute_multiple combinator)."""

    SET_STATUS = "set_status"
    TRANSITION_STATUS = "transition_status"
    SET_PRIORITY = "set_priority"
    REQUIRE_RISK_ACTION_LOG = "require_risk_action_log"
    SET_AT_RISK = "set_at_risk"
    NOTIFY_OWNER = "notify_owner"
    NOTIFY_SLACK_CHANNEL = "notify_slack"
    CREATE_COMMENT = "create_comment"
    UPDATE_ETA = "update_eta"
    UPDATE_EFFORT = "update_effort"
    EXECUTE_MULTIPLE = "execute_multiple"


class NotificationKind(_ValuesMixin, str, Enum):
    """Target of a notification emitted by a notify action."""

    OWNER = "owner"
    CHANNEL = "channel"
