from pydantic import BaseModel, ConfigDict, Field


class SigningResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(alias="uploadURL", min_length=1)
    key: str = Field(alias="Key", min_length=1)


class StoredObject(BaseModel):
    key: str = Field(alias="Key")
    size: int = Field(alias="Size")
