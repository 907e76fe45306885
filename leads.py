import datetime as dt
from dataclasses import dataclass
from typing import Any, List

from errors import ValidationError

REQUIRED_FIELDS = ("name", "surname", "email")


def utc_timestamp(now: dt.datetime = None) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2025-03-01T14:05:09.123Z"""
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    return now.astimezone(dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _text(value: Any) -> str:
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class LeadSubmission:
    name: str
    surname: str
    email: str
    birthdate: str = ""
    whatsapp: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> "LeadSubmission":
        # a JSON body that isn't an object carries none of the fields
        if not isinstance(data, dict):
            data = {}

        missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
        if missing:
            raise ValidationError(missing)

        return cls(
            name=_text(data["name"]),
            surname=_text(data["surname"]),
            email=_text(data["email"]),
            birthdate=_text(data.get("birthdate")),
            whatsapp=_text(data.get("whatsapp")),
        )

    def to_row(self, timestamp: str) -> List[str]:
        return [timestamp, self.name, self.surname, self.birthdate, self.whatsapp, self.email]
