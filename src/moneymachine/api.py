from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from moneymachine.config import load_config
from moneymachine.dashboard import render_dashboard
from moneymachine.exceptions import UnknownNodeError, UnknownSignalError
from moneymachine.machine import MoneyMachine


class ModelRequest(BaseModel):
    provider: str


class StockRequest(BaseModel):
    ticker: str


class PinRequest(BaseModel):
    x: float
    y: float


def create_app(machine: Optional[MoneyMachine] = None, run_simulation: bool = True) -> FastAPI:
    machine = machine or MoneyMachine(load_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_simulation:
            machine.start()
        yield
        if run_simulation:
            machine.stop()

    app = FastAPI(title="AI Money Machine", lifespan=lifespan)
    app.state.machine = machine

    # Enable CORS for an external frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=HTMLResponse)
    def dashboard():
        return render_dashboard(machine.snapshot(), machine.layout_snapshot())

    @app.get("/api/v1/state")
    def get_state():
        return machine.snapshot()

    @app.get("/api/v1/graph")
    def get_graph():
        """Laid-out graph with positions and styling."""
        return machine.layout_snapshot().to_dict()

    @app.get("/api/v1/news")
    def get_news():
        return [n.to_dict() for n in machine.news]

    @app.get("/api/v1/signals")
    def get_signals():
        return [s.to_dict() for s in machine.signals]

    @app.post("/api/v1/model")
    def set_model(body: ModelRequest):
        try:
            provider = machine.set_model(body.provider)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"currentModel": provider.value}

    @app.post("/api/v1/stocks")
    def add_stock(body: StockRequest):
        node = machine.add_stock(body.ticker)
        if node is None:
            return {"added": False, "node": None}
        return {"added": True, "node": node.to_dict()}

    @app.post("/api/v1/nodes/{node_id}/select")
    def select_node(node_id: str):
        try:
            return machine.select_node(node_id).to_dict()
        except UnknownNodeError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.post("/api/v1/nodes/{node_id}/pin")
    def pin_node(node_id: str, body: PinRequest):
        try:
            machine.pin_node(node_id, body.x, body.y)
        except UnknownNodeError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"pinned": node_id, "x": body.x, "y": body.y}

    @app.post("/api/v1/nodes/{node_id}/release")
    def release_node(node_id: str):
        try:
            machine.release_node(node_id)
        except UnknownNodeError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"released": node_id}

    @app.post("/api/v1/signals/{signal_id}/analyze")
    def analyze_signal(signal_id: str):
        try:
            text = machine.analyze_signal(signal_id)
        except UnknownSignalError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"signalId": signal_id, "analysis": text}

    @app.post("/api/v1/tick")
    def force_tick():
        news = machine.generate_market_event()
        return {"news": news.to_dict() if news else None}

    @app.delete("/api/v1/db")
    def clear_db():
        machine.clear_db()
        return {"cleared": True}

    return app


if __name__ == "__main__":
    import uvicorn
    config = load_config()
    uvicorn.run(create_app(MoneyMachine(config)), host=config.host, port=config.port)
