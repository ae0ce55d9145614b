"""
HTTP API for device registration, status and manual checks.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .app import AlarmServer
from .errors import InvalidToken, TransportError

logger = logging.getLogger(__name__)

SERVER_NAME = "Ticket Alarm Server"


class EventRef(BaseModel):
    code: str
    name: Optional[str] = None


EventList = List[Union[str, EventRef]]


class RegisterRequest(BaseModel):
    token: Optional[str] = None
    deviceEvents: Optional[EventList] = None


class TokenRequest(BaseModel):
    token: Optional[str] = None


class UpdateEventsRequest(BaseModel):
    token: Optional[str] = None
    events: Optional[EventList] = None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def get_server(request: Request) -> AlarmServer:
    return request.app.state.server


router = APIRouter()


@router.get('/')
async def health(server: AlarmServer = Depends(get_server)):
    return {
        'name': SERVER_NAME,
        'status': 'running',
        'browserReady': server.session_ready,
        'devices': len(server.registry),
        'lastCheck': _iso(server.scheduler.status.last_check_at),
    }


@router.post('/register')
async def register(body: RegisterRequest, server: AlarmServer = Depends(get_server)):
    server.registry.register(body.token, body.deviceEvents)
    return {'success': True, 'message': 'Token registered', 'totalTokens': len(server.registry)}


@router.post('/unregister')
async def unregister(body: TokenRequest, server: AlarmServer = Depends(get_server)):
    if body.token:
        server.registry.unregister(body.token)
    return {'success': True}


@router.post('/update-events')
async def update_events(body: UpdateEventsRequest, server: AlarmServer = Depends(get_server)):
    if body.token:
        server.registry.update_events(body.token, body.events)
    return {'success': True}


@router.get('/status')
async def get_status(server: AlarmServer = Depends(get_server)):
    sweep = server.scheduler.status
    return {
        'status': 'running',
        'registeredDevices': len(server.registry),
        'lastCheck': _iso(sweep.last_check_at),
        'isChecking': sweep.is_checking,
        'events': [{'code': e.code, 'name': e.name} for e in server.events],
        'prevAvailability': server.tracker.snapshot(),
    }


@router.get('/check')
async def check(server: AlarmServer = Depends(get_server)):
    await server.scheduler.run_sweep()
    return {
        'success': True,
        'lastCheck': _iso(server.scheduler.status.last_check_at),
        'prevAvailability': server.tracker.snapshot(),
    }


@router.post('/test-notification')
async def test_notification(body: TokenRequest, server: AlarmServer = Depends(get_server)):
    results = await server.dispatcher.send_test_burst(body.token)
    sent = sum(r.size for r in results)
    return {'success': True, 'message': f'{sent} test notifications sent!'}


async def invalid_token_handler(request: Request, exc: InvalidToken) -> JSONResponse:
    logger.warning(f"Rejected request to {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'error': exc.message})


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    logger.error(f"Test notification error: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={'error': str(exc)})


def create_app(server: AlarmServer) -> FastAPI:
    """Build the FastAPI app; its lifespan starts and stops ``server``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await server.start()
        yield
        await server.stop()

    app = FastAPI(title=SERVER_NAME, lifespan=lifespan)
    app.state.server = server
    app.include_router(router)
    app.add_exception_handler(InvalidToken, invalid_token_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
    return app
