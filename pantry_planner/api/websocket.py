"""WebSocket endpoint for real-time pantry synchronization."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from pantry_planner.api.dependencies import get_user_from_token
from pantry_planner.database import SessionLocal
from pantry_planner.services.pantry_service import PantryService
from pantry_planner.services.realtime import RealtimeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ws", tags=["websocket"])


@router.websocket("/pantries/{pantry_id}")
async def websocket_pantry_sync(
    websocket: WebSocket,
    pantry_id: int,
    token: str = Query(...),
) -> None:
    """WebSocket endpoint for real-time pantry updates.

    Authentication via token query parameter (WebSocket doesn't support headers).
    Subscribes to the pantry's Redis pub/sub channel and forwards its events.
    """
    # Manual DB session for WebSocket (can't use Depends normally)
    db = SessionLocal()
    realtime_service = RealtimeService()
    user_id: int | None = None

    try:
        user = get_user_from_token(db, token)
        if not user:
            await websocket.close(code=4001, reason="Invalid token")
            return
        user_id = user.id

        try:
            PantryService(db).get_pantry(pantry_id, user.id)
        except HTTPException:
            await websocket.close(code=4003, reason="Access denied")
            return
        finally:
            # The session is not needed while the socket is open
            db.close()

        await websocket.accept()
        logger.info(f"WebSocket connected: user={user_id}, pantry={pantry_id}")

        async def handle_messages() -> None:
            """Receive messages from Redis and forward to WebSocket."""
            async for message in realtime_service.pantry_events(pantry_id):
                try:
                    await websocket.send_json(message)
                except WebSocketDisconnect:
                    break
                except Exception as e:
                    logger.error(f"Error sending WebSocket message: {e}")
                    break

        async def handle_ping() -> None:
            """Send periodic pings to keep connection alive."""
            while True:
                try:
                    await asyncio.sleep(30)
                    await websocket.send_json({"type": "ping"})
                except Exception:
                    break

        async def handle_client() -> None:
            """Handle incoming messages from client (pong responses)."""
            while True:
                try:
                    data = await websocket.receive_json()
                    if data.get("type") == "pong":
                        continue  # Keepalive acknowledgment
                except WebSocketDisconnect:
                    break
                except Exception:
                    break

        # Stop forwarding as soon as any handler finishes (client gone)
        tasks = [
            asyncio.create_task(handle_messages()),
            asyncio.create_task(handle_ping()),
            asyncio.create_task(handle_client()),
        ]
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: user={user_id}, pantry={pantry_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        db.close()
        await realtime_service.cleanup()
