"""
GateDAO node: FastAPI application serving the governance JSON-RPC API.
"""

import time
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .. import __version__
from ..automation import DAOAutomation
from ..config import DAOConfig, load_config
from ..logger import get_logger
from ..rpc import DAOModule, RPCServer

logger = get_logger(__name__)


def create_app(config: Optional[DAOConfig] = None, dao: Optional[DAOAutomation] = None) -> FastAPI:
    """
    Build the node application.

    Args:
        config: Loaded configuration; resolved with load_config() when omitted
        dao:    Pre-built DAO to serve; built from *config* when omitted
    """
    if dao is None:
        dao = DAOAutomation(config or load_config())

    app = FastAPI(
        title="GateDAO Node",
        description="Token-gated DAO governance over JSON-RPC.",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    rpc_server = RPCServer()
    rpc_server.register_module(DAOModule(dao))

    app.state.dao = dao
    app.state.rpc_server = rpc_server
    app.state.started_at = time.time()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"
        logger.debug(f"<-- {client_ip} - \"{request.method} {request.url.path}\"")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"--> {client_ip} - \"{request.method} {request.url.path}\" ERROR: {e}")
            raise
        process_time = time.time() - start_time
        logger.info(
            f"--> {client_ip} - \"{request.method} {request.url.path}\" "
            f"{response.status_code} ({process_time:.3f}s)"
        )
        return response

    @app.post("/rpc")
    async def rpc_endpoint(request: Request):
        """JSON-RPC 2.0 endpoint (single and batch)."""
        result = await rpc_server.handle_request(await request.body())
        if result is None:
            return Response(status_code=204)
        # handle_request returns a JSON string; send it raw to avoid double-encoding
        return Response(content=result, media_type="application/json")

    @app.get("/status")
    async def get_status():
        engine = dao.engine
        return {
            "ok": True,
            "result": {
                "version": __version__,
                "uptime": int(time.time() - app.state.started_at),
                "now": engine.now(),
                "membership": dao.membership.address,
                "totalSupply": engine.total_supply(),
                "proposalCount": engine.proposal_count,
                "votingPeriod": engine.voting_period,
                "quorumPercentage": engine.quorum_percentage,
                "methods": rpc_server.get_methods(),
            },
        }

    return app
