"""
Reader for ngspice ASCII raw files.

ngspice writes one dataset per analysis; when a netlist runs several
analyses the file holds several datasets and only the last one is read.
"""
from typing import List, Tuple

import numpy as np

from .exceptions import RawFileError
from .models import Channel, ChannelKind, RawResultBundle

_KINDS = {kind.value: kind for kind in ChannelKind}


def _last_dataset(lines: List[str]) -> List[str]:
    starts = [i for i, line in enumerate(lines) if line.startswith('Title:')]
    if not starts:
        return lines
    return lines[starts[-1]:]


def _parse_header(lines: List[str]) -> Tuple[dict, List[Tuple[str, str]], int]:
    """Return header fields, (name, type) per variable, and the index of 'Values:'."""
    fields = {}
    variables: List[Tuple[str, str]] = []
    in_vars = False

    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped == 'Values:':
            return fields, variables, i
        if stripped.startswith('Binary:'):
            raise RawFileError("Binary raw files are not supported; set SPICE_ASCIIRAWFILE=1")
        if stripped == 'Variables:':
            in_vars = True
            continue
        if in_vars:
            parts = stripped.split()
            # Format: index  name  type
            if len(parts) >= 3:
                variables.append((parts[1], parts[2]))
            continue
        if ':' in stripped:
            label, value = stripped.split(':', 1)
            fields[label.strip()] = value.strip()

    raise RawFileError('No "Values:" section found in raw file')


def _to_float(token: str, is_complex: bool) -> float:
    if is_complex and ',' in token:
        # real,imag pair; keep the real part
        token = token.split(',', 1)[0]
    return float(token)


def read_raw(text: str) -> RawResultBundle:
    """Parse the text of an ngspice ASCII raw file into a RawResultBundle."""
    lines = _last_dataset(text.splitlines())
    fields, variables, values_idx = _parse_header(lines)

    try:
        n_vars = int(fields['No. Variables'])
        n_points = int(fields['No. Points'])
    except (KeyError, ValueError) as e:
        raise RawFileError(f"Could not parse raw file header: {e}")

    if len(variables) != n_vars:
        raise RawFileError(f"Expected {n_vars} variables, found {len(variables)}")

    is_complex = 'complex' in fields.get('Flags', '').lower()

    tokens = ' '.join(lines[values_idx + 1:]).split()
    values = np.empty((n_points, n_vars), dtype=np.float64)
    pos = 0
    try:
        for i in range(n_points):
            pos += 1  # skip point index
            for j in range(n_vars):
                values[i, j] = _to_float(tokens[pos], is_complex)
                pos += 1
    except (IndexError, ValueError) as e:
        raise RawFileError(f"Truncated or malformed data at point {i}: {e}")

    channels = [
        Channel(
            kind=_KINDS.get(var_type.lower(), ChannelKind.OTHER),
            name=name,
            values=values[:, j].tolist(),
        )
        for j, (name, var_type) in enumerate(variables)
    ]

    return RawResultBundle(
        header=fields.get('Title', ''),
        data_type="complex" if is_complex else "real",
        num_variables=n_vars,
        num_points=n_points,
        variable_names=[name for name, _ in variables],
        data=channels,
    )
