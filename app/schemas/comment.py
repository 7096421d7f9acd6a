from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    task_id: str
    text: str = Field(min_length=1)
    author: str = Field(min_length=1)


class CommentUpdate(BaseModel):
    text: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: str
    task_id: str
    text: str
    author: str
    created_at: str

    model_config = {"from_attributes": True}
