import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from walletcore.api.deps import get_price_service
from walletcore.api.schemas.price import PriceHistory, PricePoint, PriceResponse
from walletcore.infra.price.service import PriceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/price", tags=["price"])

PriceDep = Annotated[PriceService, Depends(get_price_service)]


@router.get("/scash", response_model=PriceResponse)
async def get_scash_price(response: Response, prices: PriceDep) -> PriceResponse:
    try:
        price = await prices.get_price_usd()
    except Exception:
        logger.exception("GET /price/scash failed")
        raise HTTPException(status_code=500, detail="Failed to fetch price")

    last_update = prices.last_update or time.time()
    response.headers["Cache-Control"] = "public, max-age=20"
    return PriceResponse(price=price, usd=price, last_update=int(last_update * 1000))


@router.get("/history", response_model=PriceHistory)
async def get_scash_history(response: Response, prices: PriceDep, days: str = Query("1")) -> PriceHistory:
    try:
        points = await prices.get_history(days)
    except Exception:
        logger.exception("GET /price/history failed")
        raise HTTPException(status_code=500, detail="Failed to fetch price history")

    response.headers["Cache-Control"] = "public, max-age=30"
    return PriceHistory(prices=[PricePoint(time=int(p["time"]), price=p["price"]) for p in points])
