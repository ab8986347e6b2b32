from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from societybills.constants import quantize

# Stored money is always whole cents.
Money = Annotated[Decimal, AfterValidator(quantize)]


class DocumentModel(BaseModel):
    """Base for models stored as camelCase JSON documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
