from enum import Enum
from typing import List, Dict, Any, Optional, Literal
from pydantic import BaseModel, Field
from datetime import datetime

# --- Enums ---

class ChannelKind(str, Enum):
    TIME = "time"
    VOLTAGE = "voltage"
    CURRENT = "current"
    OTHER = "other"

# --- Raw engine output ---

class Channel(BaseModel):
    """One named data series from the simulator (time base or a signal)."""
    kind: ChannelKind
    name: str = Field(..., description="Raw signal label, e.g. 'v(out)' or 'v(a,b)'.")
    values: List[float] = []

class RawResultBundle(BaseModel):
    """Result of a single ngspice run, as read back from its raw file."""
    header: str = ""
    data_type: Literal["real", "complex"] = "real"
    num_variables: int = 0
    num_points: int = 0
    variable_names: List[str] = []
    data: List[Channel] = []

# --- Directive parameters ---

class TranParams(BaseModel):
    """Timing parameters of a `.tran` directive. Absent fields stay None."""
    tstep: Optional[float] = None
    tstop: Optional[float] = None
    tstart: Optional[float] = None
    tmax: Optional[float] = None
    uic: Optional[bool] = None

# --- Normalized output ---

class VoltageGraph(BaseModel):
    net_name: str
    time: List[float]
    voltage: List[float]

class SimulationTransientVoltageGraph(BaseModel):
    """Interchange record for one voltage graph, times in milliseconds."""
    type: Literal["simulation_transient_voltage_graph"] = "simulation_transient_voltage_graph"
    simulation_experiment_id: str
    simulation_transient_voltage_graph_id: str
    name: str
    voltage_levels: List[float]
    timestamps_ms: List[float]
    start_time_ms: float = 0
    time_per_step: float = 0
    end_time_ms: float = 0

# --- API request/response models ---

class SimulateRequest(BaseModel):
    """Defines the input structure for a transient simulation request."""
    spice_string: str = Field(..., description="The raw SPICE netlist as a string.")
    simulation_experiment_id: Optional[str] = Field(
        None, description="Experiment id stamped on every returned graph. Defaults to the configured placeholder."
    )
    save_to_history: bool = Field(False, description="Whether to persist the resulting graphs.")

class SimulateResponse(BaseModel):
    simulation_result_circuit_json: List[SimulationTransientVoltageGraph] = []

class TranParamsRequest(BaseModel):
    spice_string: str

# --- Simulation History Models ---

class SimulationHistory(BaseModel):
    """A stored simulation run"""
    id: str
    netlist: str
    tran_params: Optional[Dict[str, Any]] = None
    results: List[SimulationTransientVoltageGraph] = []
    execution_time: Optional[float] = None  # in seconds
    created_at: datetime

class SimulationHistoryResponse(BaseModel):
    """Simulation history summary (without the graph data)"""
    id: str
    graph_names: List[str] = []
    execution_time: Optional[float] = None
    created_at: datetime

class ErrorResponse(BaseModel):
    """Standard error response model."""
    success: bool = False
    message: str
    details: Optional[str] = None
