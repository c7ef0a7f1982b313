from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

class CustomModel(BaseModel):
    """
    Base for every pydantic schema in the project.

    Fields are snake_case in Python and camelCase on the wire, which is what
    the React client sends and expects. ORM rows can be validated directly.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        # Clients post whole form objects; unknown keys are dropped, never applied.
        extra="ignore",
    )

    @field_serializer('*', check_fields=False)
    def serialize_datetime(self, value, _info):
        """Render datetimes as UTC ISO-8601 strings."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            else:
                value = value.astimezone(timezone.utc)
            return value.isoformat()
        return value


class Message(CustomModel):
    message: str
