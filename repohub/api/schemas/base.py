from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    # responses are serialized by alias, i.e. camelCase on the wire
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def use_default_if_none(cls, val, info: ValidationInfo):
        """validator for compatibility when parsing ORM instances with nullable attributes into response schemas.

        This means that `MySchema(optional_value=None)` behaves the same as
        simply omitting `optional_value` from the kwargs would

        (optional as in "not required", not optional as in "nullable". see
        https://docs.pydantic.dev/latest/migration/#required-optional-and-nullable-fields)
        """
        has_default: bool = not cls.model_fields[info.field_name].is_required()
        if val is None and has_default:
            val = cls.model_fields[info.field_name].get_default(
                call_default_factory=True
            )
        return val
