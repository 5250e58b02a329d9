from pydantic import BaseModel, ConfigDict


class Aggregate(BaseModel):
    """Base class for aggregate roots. Mutated only through their own methods."""

    model_config = ConfigDict(validate_assignment=False, arbitrary_types_allowed=True)
