from pydantic import BaseModel, ConfigDict, Field


class BucketInitResponse(BaseModel):
    success: bool
    message: str
    bucket_exists: bool = Field(..., alias="bucketExists")

    model_config = ConfigDict(populate_by_name=True)
