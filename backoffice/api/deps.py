"""
API Dependencies
Common dependencies for API endpoints
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from backoffice.core.config import Settings
from backoffice.core.database import Database
from backoffice.core.security import Actor, InvalidTokenError, decode_access_token
from backoffice.services.stock import MovementRecorder, StockAdjustmentService

# Security scheme
security = HTTPBearer()


def get_settings(request: Request) -> Settings:
    """Settings the application was built with"""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Database handle owned by the application"""
    return request.app.state.database


def get_adjustment_service(database: Database = Depends(get_database)) -> StockAdjustmentService:
    return StockAdjustmentService(database)


def get_movement_recorder(database: Database = Depends(get_database)) -> MovementRecorder:
    return MovementRecorder(database)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Actor:
    """
    Resolve the authenticated actor from the bearer token.
    """
    try:
        return decode_access_token(credentials.credentials, settings)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
