# marketplace/validation.py
from typing import Annotated, Any, ClassVar, Dict, Tuple
from fastapi import Path
from pydantic import AnyUrl, BaseModel, ConfigDict, model_validator


def normalize_email(value: str) -> str:
    return value.strip().lower()


class PatchIn(BaseModel):
    """
    Base for merge-patch bodies. Fields the client did not send stay unset
    and are left out of `to_patch()`; fields listed in `not_null` may be
    omitted but not sent as null.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    not_null: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in self.not_null:
            if name in self.model_fields_set and getattr(self, name) is None:
                field = type(self).model_fields[name]
                raise ValueError(f"{field.alias or name} cannot be null")
        return self

    def to_patch(self) -> Dict[str, Any]:
        patch = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, AnyUrl):
                value = str(value)
            patch[name] = value
        return patch


# column limits: INTEGER and Numeric(10, 2)
MAX_INT = 2**31 - 1
MAX_PRICE = 10**8

RowId = Annotated[int, Path(le=MAX_INT)]
