from pydantic import BaseModel


class Document(BaseModel):
    path: str   # relative to the store root, "/"-separated
    title: str
