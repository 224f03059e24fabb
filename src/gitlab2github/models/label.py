"""Label models."""

from pydantic import BaseModel, Field, validator


class LabelDef(BaseModel):
    """A label name and its colour, stored without a leading ``#``."""

    name: str = Field(..., description='Label name')
    color: str = Field(default='ededed', description='Hex colour without #')

    @validator('color')
    def strip_hash(cls, v):
        return v.lstrip('#')
