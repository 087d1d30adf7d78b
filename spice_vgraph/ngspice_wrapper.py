"""
ngspice batch-mode wrapper.

Runs ngspice as a subprocess and reads the results back from an ASCII raw
file, so any vector the netlist produces is available, whether or not it
appears on a `.print` line.
"""
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from . import config
from .exceptions import EngineUnavailableError, NgspiceError, RawFileError
from .models import RawResultBundle
from .raw_file import read_raw

logger = logging.getLogger(__name__)

NGSPICE_CANDIDATES = ['/usr/local/bin/ngspice', '/usr/bin/ngspice', 'ngspice']


class NgspiceWrapper:
    """Runs netlists through the ngspice executable."""

    def __init__(self, ngspice_path: Optional[str] = None, timeout: Optional[float] = None):
        self.ngspice_path = self._find_ngspice(ngspice_path or config.NGSPICE_PATH)
        self.timeout = timeout if timeout is not None else config.NGSPICE_TIMEOUT
        self.version_info = self._check_version()
        logger.info(f"Using {self.version_info} at {self.ngspice_path}")

    def _find_ngspice(self, configured: str) -> str:
        """Find the ngspice executable"""
        candidates = [configured] if configured else NGSPICE_CANDIDATES
        for path in candidates:
            if os.path.exists(path):
                return path
            found = shutil.which(path)
            if found:
                return found
        raise EngineUnavailableError(f"ngspice not found (tried {', '.join(candidates)})")

    def _check_version(self) -> str:
        """Run `ngspice -v` and return the first non-empty line of its output"""
        try:
            result = subprocess.run(
                [self.ngspice_path, '-v'],
                capture_output=True,
                text=True,
                timeout=5
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise EngineUnavailableError(f"ngspice did not start: {e}")

        if result.returncode != 0:
            raise EngineUnavailableError(f"ngspice -v failed: {result.stderr.strip()}")

        for line in result.stdout.splitlines():
            if line.strip():
                return line.strip()
        return "ngspice"

    def _prepare_netlist(self, netlist: str) -> str:
        """The first line is taken as the title; the deck must close with .end"""
        if not netlist.strip().lower().endswith('.end'):
            netlist = f"{netlist}\n.end"
        return f"{netlist}\n"

    def run(self, netlist: str) -> Optional[RawResultBundle]:
        """Simulate a netlist and return its raw vectors.

        Returns None when ngspice ran but wrote no data (no analysis in the
        netlist). Raises NgspiceError when the simulation fails.
        """
        with tempfile.TemporaryDirectory(prefix='spice_vgraph_') as workdir:
            netlist_file = Path(workdir) / 'circuit.cir'
            raw_file = Path(workdir) / 'circuit.raw'
            netlist_file.write_text(self._prepare_netlist(netlist))

            env = dict(os.environ, SPICE_ASCIIRAWFILE='1')
            try:
                result = subprocess.run(
                    [self.ngspice_path, '-b', '-r', str(raw_file), str(netlist_file)],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    env=env,
                    cwd=workdir
                )
            except subprocess.TimeoutExpired:
                raise NgspiceError(f"ngspice timed out after {self.timeout} seconds")

            if result.returncode != 0:
                raise NgspiceError(f"ngspice failed with exit code {result.returncode}", stderr=result.stderr)

            if not raw_file.exists() or raw_file.stat().st_size == 0:
                logger.warning("ngspice produced no raw data; does the netlist contain an analysis?")
                return None

            try:
                return read_raw(raw_file.read_text(errors='replace'))
            except RawFileError as e:
                raise NgspiceError(f"Could not read ngspice output: {e}", stderr=result.stderr)
