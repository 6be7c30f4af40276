"""Tag-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class TopTag(BaseModel):
    """Tag with the number of posts currently carrying it."""

    name: str
    color: str
    post_count: int

    model_config = ConfigDict(from_attributes=True)
