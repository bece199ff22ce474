from pydantic import BaseModel


class CheckoutCreate(BaseModel):
    announcement_id: int


class CheckoutResponse(BaseModel):
    id: str
    url: str | None = None
    amount: float
