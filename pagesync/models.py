from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """
    One row of the synchronized list.

    Identity is the ``id`` field: two records with the same id denote the
    same logical entry, whatever their display name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    display_name: str = Field(default="", alias="displayName")
