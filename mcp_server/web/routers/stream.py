"""Stream router -- WebSocket channel for agent instructions and price pushes.

Every frame is a JSON object ``{"event": <name>, "data": {...}}`` in both
directions. Client events:

- ``agentInstruction`` ``{agentId, instruction, walletAddress?}``
  -> ``agentResponse`` or ``error``
- ``subscribe:ticker`` / ``subscribe:orderbook`` ``{symbol}``
  -> ``subscribed``, then ``ticker`` / ``orderbook`` pushes
- ``unsubscribe`` ``{symbol, stream}`` -> ``unsubscribed``
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from solders.pubkey import Pubkey

from mcp_server.market.binance import BinanceContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stream"])

SUBSCRIBE_EVENTS = {"subscribe:ticker": "ticker", "subscribe:orderbook": "depth"}


def _ticker_payload(message: dict[str, Any]) -> dict[str, Any]:
    return {
        "symbol": message.get("s"),
        "price": message.get("c"),
        "priceChangePercent": message.get("P"),
        "volume": message.get("v"),
        "timestamp": message.get("E"),
    }


def _orderbook_payload(message: dict[str, Any]) -> dict[str, Any]:
    return {
        "symbol": message.get("s"),
        "bids": message.get("b", []),
        "asks": message.get("a", []),
        "timestamp": message.get("E"),
    }


class StreamSession:
    """State of one connected WebSocket client."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self.state = websocket.app.state
        self.subscriptions: dict[tuple[str, str], Callable] = {}

    @property
    def binance(self) -> BinanceContext:
        return self.state.binance

    async def emit(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": data})

    async def error(self, message: str) -> None:
        await self.emit("error", {"message": message})

    async def handle(self, event: str, data: dict[str, Any]) -> None:
        if event == "agentInstruction":
            await self.handle_instruction(data)
        elif event in SUBSCRIBE_EVENTS:
            await self.handle_subscribe(SUBSCRIBE_EVENTS[event], data)
        elif event == "unsubscribe":
            await self.handle_unsubscribe(data)
        else:
            await self.error(f"Unknown event: {event}")

    async def handle_instruction(self, data: dict[str, Any]) -> None:
        agent_id = data.get("agentId")
        instruction = data.get("instruction")
        wallet_address = data.get("walletAddress")

        if not agent_id or not instruction:
            await self.error("Missing agentId or instruction")
            return
        if not all(isinstance(v, str) for v in (agent_id, instruction, wallet_address or "")):
            await self.error("agentId, instruction and walletAddress must be strings")
            return

        try:
            Pubkey.from_string(agent_id)
            if wallet_address:
                Pubkey.from_string(wallet_address)
        except (ValueError, TypeError):
            await self.error("Invalid public key")
            return

        logger.info("Processing instruction for agent %s: %s", agent_id, instruction)

        agent = self.state.agents.get_agent(agent_id)
        if agent is None:
            await self.error(f"Agent {agent_id} not found")
            return

        if wallet_address:
            await self.state.wallets.setup_agent_for_wallet(agent, wallet_address)

        try:
            result = await agent.process_instruction(instruction)
        except Exception as exc:
            logger.exception("Error processing agent instruction")
            await self.error(str(exc) or "Unknown error")
            return

        await self.emit("agentResponse", result.to_dict())

    async def handle_subscribe(self, stream: str, data: dict[str, Any]) -> None:
        symbol = data.get("symbol")
        if not symbol or not isinstance(symbol, str):
            await self.error("Symbol is required")
            return

        key = (symbol.lower(), stream)
        if key in self.subscriptions:
            await self.emit("subscribed", {"symbol": symbol, "stream": stream})
            return

        if stream == "ticker":
            event, shape = "ticker", _ticker_payload
        else:
            event, shape = "orderbook", _orderbook_payload

        async def forward(message: dict[str, Any]) -> None:
            await self.emit(event, shape(message))

        self.binance.subscribe(symbol, stream, forward)
        self.subscriptions[key] = forward
        logger.info("Client subscribed to %s for %s", stream, symbol)
        await self.emit("subscribed", {"symbol": symbol, "stream": stream})

    async def handle_unsubscribe(self, data: dict[str, Any]) -> None:
        symbol = data.get("symbol")
        stream = data.get("stream")
        if stream == "orderbook":
            stream = "depth"
        if not isinstance(symbol, str) or not isinstance(stream, str) or not symbol or not stream:
            await self.error("Symbol and stream are required")
            return

        callback = self.subscriptions.pop((symbol.lower(), stream), None)
        if callback is not None:
            self.binance.unsubscribe(symbol, stream, callback)
        logger.info("Client unsubscribed from %s for %s", stream, symbol)
        await self.emit("unsubscribed", {"symbol": symbol, "stream": stream})

    def close(self) -> None:
        for (symbol, stream), callback in self.subscriptions.items():
            self.binance.unsubscribe(symbol, stream, callback)
        self.subscriptions.clear()


@router.websocket("/ws")
async def stream_socket(websocket: WebSocket):
    await websocket.accept()
    session = StreamSession(websocket)
    client = websocket.client
    logger.info("New client connected: %s", f"{client.host}:{client.port}" if client else "unknown")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                await session.error("Malformed JSON frame")
                continue
            if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
                await session.error("Frame must be an object with an 'event' field")
                continue

            data = frame.get("data")
            try:
                await session.handle(frame["event"], data if isinstance(data, dict) else {})
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception("Error handling %s frame", frame["event"])
                await session.error(f"Failed to handle event: {frame['event']}")
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        session.close()
