"""
Parser for the `.tran` directive of a SPICE netlist.

Only the first `.tran` line is read. Its numeric arguments are assigned in
order to tstep, tstop, tstart and tmax; a `UIC` flag may appear anywhere.
"""
import re
from typing import Optional

from .models import TranParams

# Engineering suffix multipliers (matched against the lowercased token)
SUFFIX_MULTIPLIERS = {
    't': 1e12,
    'g': 1e9,
    'meg': 1e6,
    'k': 1e3,
    'm': 1e-3,
    'ms': 1e-3,
    'u': 1e-6,
    'us': 1e-6,
    'n': 1e-9,
    'ns': 1e-9,
    'p': 1e-12,
    'ps': 1e-12,
    'f': 1e-15,
    'fs': 1e-15,
    's': 1,
}

POSITIONAL_FIELDS = ('tstep', 'tstop', 'tstart', 'tmax')

_NUMBER_RE = re.compile(r'^([+-]?\d*\.?\d+(?:e[+-]?\d+)?)([a-z]+)?$')


def parse_numeric_token(token: str) -> Optional[float]:
    """Convert a value like '1ms', '0.1u' or '2.5e-3' to a float.

    Returns None when the token is not a number. An unknown suffix leaves
    the base value unscaled.
    """
    normalized = token.replace(',', '').lower()
    match = _NUMBER_RE.match(normalized)
    if not match:
        return None

    base = float(match.group(1))
    suffix = match.group(2)
    if not suffix:
        return base

    multiplier = SUFFIX_MULTIPLIERS.get(suffix)
    if multiplier is None:
        multiplier = SUFFIX_MULTIPLIERS.get(re.sub(r's$', '', suffix), 1)
    return base * multiplier


def find_tran_line(spice_string: str) -> Optional[str]:
    """Return the first `.tran` line, trimmed, or None."""
    for raw_line in spice_string.splitlines():
        line = raw_line.strip()
        if not line or line.startswith('*'):
            continue
        if line.lower().startswith('.tran'):
            return line
    return None


def parse_tran_params(spice_string: str) -> Optional[TranParams]:
    """Extract the transient-analysis parameters from a netlist.

    Returns None if there is no `.tran` line and an empty TranParams if the
    directive has no arguments.
    """
    line = find_tran_line(spice_string)
    if line is None:
        return None

    without_comments = line.split(';', 1)[0]
    tokens = without_comments.split()
    if len(tokens) <= 1:
        return TranParams()

    values = []
    uic = False
    for token in tokens[1:]:
        if token.lower() == 'uic':
            uic = True
            continue
        value = parse_numeric_token(token)
        if value is not None:
            values.append(value)

    params = TranParams(**dict(zip(POSITIONAL_FIELDS, values)))
    if uic:
        params.uic = True
    return params
