"""FastAPI web application for Mixer Client."""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from mixer_client import __version__
from mixer_client.models.mixer import LIQUID_COUNT

logger = logging.getLogger(__name__)


# --- Request Models ---

class DragMove(BaseModel):
    """Pointer moved while dragging a boundary."""
    degrees: float


class ShiftRequest(BaseModel):
    """Complete drag of a boundary."""
    degrees: float


class AdjustRequest(BaseModel):
    """Plus/minus button."""
    direction: int = Field(ge=-1, le=1)


class SliderValue(BaseModel):
    """Slider position in milliseconds."""
    value: float


def create_app(mixer_manager: Any) -> FastAPI:
    """Create the FastAPI application.

    Args:
        mixer_manager: MixerManager instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Mixer Client",
        description="Web interface for the liquid mixer control",
        version=__version__,
    )

    app.state.mixer_manager = mixer_manager
    session = mixer_manager.session

    def liquid_index(number: int) -> int:
        if not 1 <= number <= LIQUID_COUNT:
            raise HTTPException(status_code=404, detail=f"Unknown liquid: {number}")
        return number - 1

    def command_result(sent: bool) -> dict[str, Any]:
        result: dict[str, Any] = {"success": sent}
        if not sent:
            result["error"] = session.gateway.last_error
        result["status"] = mixer_manager.get_status()
        return result

    # --- Status ---

    @app.get("/api/status")
    async def get_status() -> dict[str, Any]:
        """Get current state of the mixer client."""
        return mixer_manager.get_status()

    @app.post("/api/reload")
    async def reload() -> dict[str, Any]:
        """Forget cached settings and fetch them again on the next tick."""
        session.reload()
        return mixer_manager.get_status()

    # --- Chart ---

    @app.post("/api/liquids/{number}/drag/begin")
    async def begin_drag(number: int) -> dict[str, Any]:
        """Press on a segment boundary."""
        try:
            session.control.begin_drag(liquid_index(number))
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return mixer_manager.get_status()

    @app.post("/api/liquids/{number}/drag/move")
    async def move_drag(number: int, move: DragMove) -> dict[str, Any]:
        """Move the pressed boundary."""
        index = liquid_index(number)
        if session.control.drag_index != index:
            raise HTTPException(status_code=409, detail=f"Liquid {number} is not being dragged")
        increments = session.control.drag(move.degrees)
        return {"increments": increments, "status": mixer_manager.get_status()}

    @app.post("/api/liquids/{number}/drag/end")
    async def end_drag(number: int) -> dict[str, Any]:
        """Release the pressed boundary; sends the command."""
        index = liquid_index(number)
        if session.control.drag_index != index:
            raise HTTPException(status_code=409, detail=f"Liquid {number} is not being dragged")
        session.control.end_drag()
        results = await session.flush()
        return command_result(session.is_mixer and all(results))

    @app.post("/api/liquids/{number}/shift")
    async def shift(number: int, request: ShiftRequest) -> dict[str, Any]:
        """Drag a boundary by a number of degrees in one gesture."""
        index = liquid_index(number)
        if session.control.is_being_dragged():
            raise HTTPException(status_code=409, detail="Another drag is in progress")
        return command_result(await session.shift(index, request.degrees))

    @app.post("/api/liquids/{number}/adjust")
    async def adjust(number: int, request: AdjustRequest) -> dict[str, Any]:
        """Move a boundary by one button step."""
        return command_result(await session.adjust(liquid_index(number), request.direction))

    # --- Slider ---

    @app.post("/api/slider/press")
    async def press_slider() -> dict[str, Any]:
        """Hold the cycle timespan slider."""
        session.press_slider()
        return mixer_manager.get_status()

    @app.post("/api/slider/input")
    async def input_slider(request: SliderValue) -> dict[str, Any]:
        """Slider moved; updates only the readout."""
        return {"readout": session.input_slider(request.value)}

    @app.post("/api/slider/commit")
    async def commit_slider(request: SliderValue) -> dict[str, Any]:
        """Slider value changed; sends the command."""
        return command_result(await session.commit_slider(request.value))

    @app.post("/api/pointer/release")
    async def release_pointer() -> dict[str, Any]:
        """Mouse up or touch end anywhere on the page; ends a pending drag too."""
        session.release_pointer()
        await session.flush()
        return mixer_manager.get_status()

    return app
