import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

import PySpice.Logging.Logging as Logging
from fastapi import FastAPI, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .database import connect_to_mongo, close_mongo_connection
from .engine import engine_provider, simulate
from .exceptions import EngineUnavailableError, NgspiceError
from .models import (
    ErrorResponse, SimulateRequest, SimulateResponse,
    SimulationHistory, SimulationHistoryResponse,
    TranParams, TranParamsRequest,
)
from .services import simulation_history_service
from .tran_params import parse_tran_params

# Setup logging (PySpice's console configuration)
Logging.setup_logging()
logging.getLogger("spice_vgraph").setLevel(config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await connect_to_mongo()
    yield
    # Shutdown
    await close_mongo_connection()

app = FastAPI(
    title="spice-vgraph",
    description="Runs SPICE netlists through ngspice and returns transient voltage graphs "
                "resolved from the netlist's .print tran and .tran directives.",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", summary="Health Check")
async def health():
    """
    Reports whether ngspice could be started and which version it is.
    """
    try:
        engine = await run_in_threadpool(engine_provider.get)
    except EngineUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ErrorResponse(message="ngspice is not available.", details=str(e)).model_dump()
        )
    return {"ngspice": engine.version_info, "message": "spice-vgraph is running and ready!"}


@app.post(
    "/simulate",
    response_model=SimulateResponse,
    summary="Run Transient Simulation",
    responses={
        400: {"model": ErrorResponse, "description": "ngspice rejected the netlist or the simulation failed."},
        503: {"model": ErrorResponse, "description": "ngspice is not available."},
        500: {"model": ErrorResponse, "description": "Unexpected server error."}
    }
)
async def run_simulation(request: SimulateRequest):
    """
    Simulates the netlist and returns one voltage graph record per plotted signal.

    Without a `.print tran` line every node voltage is returned; with one,
    only the listed signals are returned, resampled onto the `.tran` step.
    """
    start_time = time.time()
    try:
        response = await simulate(
            request.spice_string,
            simulation_experiment_id=request.simulation_experiment_id
        )
    except EngineUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ErrorResponse(message="ngspice is not available.", details=str(e)).model_dump()
        )
    except NgspiceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ErrorResponse(
                message=str(e),
                details=e.stderr or "Please check your netlist syntax."
            ).model_dump()
        )
    except Exception as e:
        logger.exception(f"Unhandled exception in /simulate endpoint: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorResponse(
                message="An unexpected internal server error occurred.",
                details="Please contact support or try again later."
            ).model_dump()
        )
    execution_time = time.time() - start_time

    if request.save_to_history:
        try:
            await simulation_history_service.save_simulation(
                netlist=request.spice_string,
                records=response.simulation_result_circuit_json,
                execution_time=execution_time
            )
        except Exception as e:
            # Log the error but don't fail the simulation
            logger.warning(f"Failed to save simulation history: {e}")

    return response


@app.post("/tran-params", response_model=Optional[TranParams], response_model_exclude_none=True,
          summary="Parse .tran Directive")
async def read_tran_params(request: TranParamsRequest):
    """
    Returns the timing parameters of the netlist's first `.tran` line, or null.
    """
    return parse_tran_params(request.spice_string)


# === Simulation History Endpoints ===

@app.get("/simulations", response_model=List[SimulationHistoryResponse], summary="Get Simulation History")
async def get_simulation_history(limit: int = 50):
    """
    Most recent stored simulation runs.
    """
    return await simulation_history_service.get_recent_simulations(limit)


@app.get("/simulations/{simulation_id}", response_model=SimulationHistory, summary="Get Simulation Details")
async def get_simulation_details(simulation_id: str):
    """
    A stored simulation run with its voltage graph records.
    """
    simulation = await simulation_history_service.get_simulation_by_id(simulation_id)
    if not simulation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Simulation not found"
        )
    return simulation


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("spice_vgraph.main:app", host="0.0.0.0", port=8000, reload=True)
