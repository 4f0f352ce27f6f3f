"""FastAPI dependencies shared by the v1 routers."""

import logging
from typing import Generator

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from wheeltracker.market_data.config import FinnhubConfig
from wheeltracker.market_data.finnhub_client import FinnhubQuoteProvider
from wheeltracker.market_data.provider import QuoteProvider
from wheeltracker.server.config import settings
from wheeltracker.server.database.session import get_db
from wheeltracker.server.repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def get_uow(db: Session = Depends(get_db)) -> UnitOfWork:
    """Unit of work bound to the request's database session."""
    return UnitOfWork(db)


def get_quote_provider() -> Generator[QuoteProvider, None, None]:
    """Finnhub quote provider built from settings, closed after the request.

    Raises:
        HTTPException: 503 if no Finnhub API key is configured
    """
    try:
        config = FinnhubConfig.from_settings(settings)
    except ValueError as e:
        logger.warning(f"Quote provider unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e

    provider = FinnhubQuoteProvider(config)
    try:
        yield provider
    finally:
        provider.close()
