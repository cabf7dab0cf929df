"""
Snapshot Migrations

Snapshots carry no version number; their shape is detected by which
fields are present. Each step only ADDS missing fields with defaults.
Nothing is removed or renamed, and a step that finds its field already
present leaves it as is, so migrating an already-migrated snapshot is a
no-op.

History of shape changes:
1. themeMode added (default "normal")
2. automation rules gained frequency; older rules were all daily and
   keep their excludeWeekends setting (true if absent)
3. automation rules gained weekdays for weekly schedules
"""

from typing import Any

from src.services.storage.interface import CorruptStateError


DEFAULT_THEME = "normal"
DEFAULT_FREQUENCY = "daily"


def _migrate_rule(rule: Any) -> Any:
    if not isinstance(rule, dict):
        raise CorruptStateError(f"Automation rule is not an object: {rule!r}")

    migrated = dict(rule)
    if not migrated.get("frequency"):
        migrated["frequency"] = DEFAULT_FREQUENCY
        if migrated.get("excludeWeekends") is None:
            migrated["excludeWeekends"] = True
    if migrated.get("weekdays") is None:
        migrated["weekdays"] = []
    return migrated


def migrate_state(raw: Any) -> dict:
    """
    Bring a raw snapshot up to the current shape.

    Returns a new dict; the input is not modified.

    Raises:
        CorruptStateError: if the snapshot is not shaped like a state at all
    """
    if not isinstance(raw, dict):
        raise CorruptStateError(f"State snapshot must be an object, got {type(raw).__name__}")

    migrated = dict(raw)

    for collection in ("accounts", "transactions", "automationRules"):
        if migrated.get(collection) is None:
            migrated[collection] = []
        elif not isinstance(migrated[collection], list):
            raise CorruptStateError(f"{collection} must be a list")

    if not migrated.get("themeMode"):
        migrated["themeMode"] = DEFAULT_THEME

    migrated["automationRules"] = [_migrate_rule(r) for r in migrated["automationRules"]]

    return migrated
