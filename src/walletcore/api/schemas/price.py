from pydantic import BaseModel


class PriceResponse(BaseModel):
    price: float
    usd: float
    source: str = "coingecko"
    last_update: int  # milliseconds


class PricePoint(BaseModel):
    time: int  # milliseconds
    price: float


class PriceHistory(BaseModel):
    prices: list[PricePoint]
