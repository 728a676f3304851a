"""
Customer, employee and booking preferences: privacy, security, notifications,
language, shift availability and salon booking rules.

Each namespace has a pydantic schema with defaults. Stored values are JSON
blobs keyed by namespace in an injected backend; reads merge the stored
values over the defaults.
"""

import json
import sqlite3
import threading
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core import database
from core.config import DB_PATH, PREFERENCES_BACKEND, PREFERENCES_FILE
from core.errors import PreferenceValidationError
from core.log import get_logger

logger = get_logger(__name__)


# =============================================================================
# SCHEMAS
# =============================================================================


class PreferenceSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class CustomerPrivacyPreferences(PreferenceSchema):
    profile_visibility: bool = True
    show_location: bool = True
    allow_data_sharing: bool = False
    allow_analytics: bool = True
    allow_marketing: bool = False
    allow_notifications: bool = True
    allow_location_services: bool = True
    allow_camera_access: bool = True
    allow_photo_sharing: bool = False
    allow_review_sharing: bool = True
    allow_booking_history: bool = True
    allow_personalization: bool = True


class CustomerSecurityPreferences(PreferenceSchema):
    biometric_login: bool = True
    two_factor_auth: bool = False
    login_notifications: bool = True
    suspicious_activity_alerts: bool = True
    session_management: bool = True
    camera_access: bool = True
    location_access: bool = True
    contacts_access: bool = False
    backup_email: str = ""
    phone_number: str = ""


class CustomerNotificationPreferences(PreferenceSchema):
    pause_all: bool = False
    posts: bool = False
    messages: bool = True
    email: bool = False
    appointment_reminders: bool = False
    waitlist: bool = False


class EmployeePrivacyPreferences(PreferenceSchema):
    allow_profile_discovery: bool = True
    show_online_status: bool = True
    share_work_gallery_publicly: bool = True
    show_reviews_on_profile: bool = True
    allow_messages_from_non_clients: bool = False
    show_profile_to_clients: bool = True
    show_contact_info: bool = False
    show_social_media: bool = True
    data_collection: bool = True
    analytics: bool = True
    data_retention: bool = True
    location_tracking: bool = False


class EmployeeSecurityPreferences(PreferenceSchema):
    two_factor_auth_enabled: bool = False
    login_alerts_email: bool = True
    login_alerts_push: bool = True


class NotificationChannels(PreferenceSchema):
    sms: bool = False
    email: bool = False
    push: bool = False


class ShiftReminderSettings(NotificationChannels):
    reminder_hours: int = Field(default=24, ge=1)


class EmployeeAvailabilityPreferences(PreferenceSchema):
    """Which shift events reach an employee, and on which channels."""

    shift_reminders: ShiftReminderSettings = Field(default_factory=ShiftReminderSettings)
    shift_swaps: NotificationChannels = Field(default_factory=lambda: NotificationChannels(push=True))
    shift_releases: NotificationChannels = Field(default_factory=NotificationChannels)
    schedule_changes: NotificationChannels = Field(default_factory=NotificationChannels)


class LanguageSettings(PreferenceSchema):
    auto_detect_language: bool = True
    show_language_indicator: bool = True
    translate_reviews: bool = False
    translate_notifications: bool = True


class RegionalSettings(PreferenceSchema):
    show_local_time: bool = True
    show_local_currency: bool = True
    show_local_salons: bool = True
    use_metric_system: bool = False
    use_device_timezone: bool = True


class CustomerLanguagePreferences(PreferenceSchema):
    current_language: str = "English"
    current_region: str = "Canada"
    current_currency: str = "CAD"
    current_date_format: str = "MM/DD/YYYY"
    current_time_format: str = "12-hour"
    device_timezone: str = ""
    language_settings: LanguageSettings = Field(default_factory=LanguageSettings)
    regional_settings: RegionalSettings = Field(default_factory=RegionalSettings)


class BookingPreferences(PreferenceSchema):
    """Salon-wide booking rules."""

    max_advance_days: int = Field(default=30, ge=0)
    cancellation_hours: int = Field(default=24, ge=0)
    deposit_percentage: int = Field(default=20, ge=0, le=100)
    reminder_minutes_before: int = Field(default=24 * 60, ge=0)
    waitlist_max_size: int = Field(default=10, ge=0)


PREFERENCE_SCHEMAS: dict[str, type[PreferenceSchema]] = {
    "customer.privacy": CustomerPrivacyPreferences,
    "customer.security": CustomerSecurityPreferences,
    "customer.notification": CustomerNotificationPreferences,
    "customer.language": CustomerLanguagePreferences,
    "employee.privacy": EmployeePrivacyPreferences,
    "employee.security": EmployeeSecurityPreferences,
    "employee.availability": EmployeeAvailabilityPreferences,
    "booking": BookingPreferences,
}


# =============================================================================
# BACKENDS
# =============================================================================


class PreferenceBackend(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryPreferenceBackend:
    """Process-local backend, mainly for tests."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFilePreferenceBackend:
    """All namespaces in one JSON file: {key: raw_json_string}."""

    def __init__(self, path: Path | str = PREFERENCES_FILE):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                items = json.load(f)
        except ValueError as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, e)
            return {}
        if not isinstance(items, dict):
            logger.warning("Ignoring preferences file %s: not a JSON object", self.path)
            return {}
        return items

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._load()
            items[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2)
            tmp_path.replace(self.path)


class SqlitePreferenceBackend:
    """Backend using the preferences table of the project database."""

    def __init__(self, db_path: Path | str = DB_PATH, conn: sqlite3.Connection | None = None):
        self.conn = conn or database.get_connection(db_path)
        database.create_tables(self.conn)

    def get_item(self, key: str) -> str | None:
        return database.get_preference_value(self.conn, key)

    def set_item(self, key: str, value: str) -> None:
        database.set_preference_value(self.conn, key, value)


def create_backend(kind: str = PREFERENCES_BACKEND) -> PreferenceBackend:
    """Build the backend named in configuration: sqlite, file or memory."""
    if kind == "sqlite":
        return SqlitePreferenceBackend()
    if kind == "file":
        return JsonFilePreferenceBackend()
    if kind == "memory":
        return MemoryPreferenceBackend()
    raise ValueError(f"Unknown preferences backend '{kind}'")


# =============================================================================
# STORE
# =============================================================================


def _nested_schema(schema: type[PreferenceSchema], name: str) -> type[PreferenceSchema] | None:
    annotation = schema.model_fields[name].annotation
    if isinstance(annotation, type) and issubclass(annotation, PreferenceSchema):
        return annotation
    return None


def _known_values(schema: type[PreferenceSchema], stored: dict) -> dict:
    """Drop stored keys, at any depth, that the schema no longer has."""
    known = {}
    for name, value in stored.items():
        if name not in schema.model_fields:
            continue
        nested = _nested_schema(schema, name)
        if nested is not None and isinstance(value, dict):
            value = _known_values(nested, value)
        known[name] = value
    return known


def _merge(current: dict, changes: dict) -> dict:
    """Apply changes over current; nested groups are merged key by key."""
    merged = dict(current)
    for name, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(name), dict):
            value = _merge(merged[name], value)
        merged[name] = value
    return merged


class PreferenceStore:
    """Typed get/update over a key-value backend."""

    def __init__(self, backend: PreferenceBackend):
        self.backend = backend

    @staticmethod
    def schema_for(namespace: str) -> type[PreferenceSchema]:
        try:
            return PREFERENCE_SCHEMAS[namespace]
        except KeyError:
            raise KeyError(f"Unknown preference namespace '{namespace}'") from None

    def get(self, namespace: str) -> PreferenceSchema:
        """
        Current preferences for a namespace.

        Missing or unreadable stored data yields the defaults; stored keys
        that no longer exist in the schema are dropped. A partially stored
        nested group keeps the defaults for its missing keys.
        """
        schema = self.schema_for(namespace)
        raw = self.backend.get_item(namespace)
        if not raw:
            return schema()

        try:
            stored = json.loads(raw)
            if not isinstance(stored, dict):
                raise ValueError("stored preferences are not an object")
            merged = _merge(schema().model_dump(), _known_values(schema, stored))
            # validated from JSON so nested groups arrive as objects under strict mode
            return schema.model_validate_json(json.dumps(merged))
        except (ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable preferences for %s: %s", namespace, e)
            return schema()

    def update(self, namespace: str, changes: dict) -> PreferenceSchema:
        """Merge `changes` into the current preferences, validate and persist."""
        schema = self.schema_for(namespace)
        current = self.get(namespace)
        try:
            updated = schema.model_validate_json(json.dumps(_merge(current.model_dump(), changes)))
        except ValidationError as e:
            details = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise PreferenceValidationError(
                f"Invalid {namespace} preferences", details
            ) from e

        self.backend.set_item(namespace, updated.model_dump_json())
        return updated
