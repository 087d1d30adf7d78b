"""
Runtime configuration for the spice-vgraph service, read from the environment.
"""
import os
from dotenv import load_dotenv

# Load environment variables (override existing ones)
load_dotenv(override=True)

# ngspice executable; empty means search the usual locations and PATH
NGSPICE_PATH = os.getenv("NGSPICE_PATH", "")
NGSPICE_TIMEOUT = float(os.getenv("NGSPICE_TIMEOUT", "30"))  # seconds

# MongoDB
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "spice_vgraph")

# Interchange records
SIMULATION_EXPERIMENT_ID = os.getenv(
    "SIMULATION_EXPERIMENT_ID", "placeholder_simulation_experiment_id"
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
