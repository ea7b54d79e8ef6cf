"""
Messenger introspection endpoints.

Read-only view of the installed plan, for operators checking which
buses, transports and routes a running service ended up with.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from .dependencies import MessengerState, get_messenger

router = APIRouter(prefix="/messenger", tags=["messenger"])


@router.get("/plan")
async def get_resolved_plan(state: MessengerState = Depends(get_messenger)) -> dict[str, Any]:
    """Full resolved plan."""
    return state.plan.to_dict()


@router.get("/buses")
async def list_buses(state: MessengerState = Depends(get_messenger)) -> dict[str, Any]:
    """Buses with their middleware ids, default bus first."""
    buses = sorted(state.plan.buses.values(), key=lambda b: not b.is_default)
    return {
        "default_bus": state.plan.default_bus,
        "buses": [
            {"id": b.bus_id, "default": b.is_default, "middleware": b.middleware_ids}
            for b in buses
        ],
    }


@router.get("/routing")
async def list_routes(state: MessengerState = Depends(get_messenger)) -> dict[str, Any]:
    """Routing table: message type -> senders."""
    return {
        "routes": [
            {
                "message": r.message_type,
                "senders": r.sender_names,
                "send_and_handle": r.send_and_handle,
            }
            for r in state.plan.routing.values()
        ],
    }
