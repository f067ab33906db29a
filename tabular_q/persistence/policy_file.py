"""
Policy Snapshot Files.

A snapshot stores, for every canonical state, its feature vector followed by
its value row. The format is chosen from the file suffix:

- ``.npz``: binary NumPy archive with ``dims``, ``features`` and ``values``
- anything else: plain text, one record per line::

      # tabular-q policy
      # dims <k> <num_actions>
      # states <N>
      <f_1> ... <f_k> <Q_1> ... <Q_num_actions>

Text values are written with 17 significant digits, which is enough for
every float64 to read back bit-for-bit.

State handles are not stored. On load, states are registered in file order,
so only the state → row association is preserved.
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np

from tabular_q.core.exceptions import PolicyFileError
from tabular_q.core.state_space import StateSpace
from tabular_q.core.value_table import ValueTable

MAGIC = "tabular-q policy"
FLOAT_FORMAT = "%.17g"


def write_policy(
    filepath: Union[str, Path],
    state_space: StateSpace,
    q_table: ValueTable,
) -> None:
    """
    Write ``state_space`` and ``q_table`` to ``filepath``.

    Raises:
        OSError: If the file cannot be written
    """
    filepath = Path(filepath)
    features, values = _to_arrays(state_space, q_table)
    dims = np.array([features.shape[1], values.shape[1]], dtype=np.int64)

    if filepath.suffix == ".npz":
        with open(filepath, "wb") as f:
            np.savez(f, dims=dims, features=features, values=values)
        return

    header = "\n".join([
        MAGIC,
        f"dims {dims[0]} {dims[1]}",
        f"states {features.shape[0]}",
    ])
    with open(filepath, "w", encoding="utf-8") as f:
        f.write("".join(f"# {line}\n" for line in header.split("\n")))
        if features.shape[0]:
            np.savetxt(f, np.hstack([features, values]), fmt=FLOAT_FORMAT)


def read_policy(
    filepath: Union[str, Path],
    num_actions: int,
    initial_value: float = 0.0,
) -> Tuple[StateSpace, ValueTable]:
    """
    Build a fresh state space and value table from ``filepath``.

    Args:
        filepath: Snapshot written by :func:`write_policy`
        num_actions: Action count the caller expects
        initial_value: Initial value for rows created after loading

    Returns:
        ``(state_space, q_table)`` holding every stored state

    Raises:
        OSError: If the file cannot be opened
        PolicyFileError: If the contents are malformed or were written for a
            different number of actions
    """
    filepath = Path(filepath)
    if filepath.suffix == ".npz":
        features, values = _read_npz(filepath)
    else:
        features, values = _read_text(filepath)

    if values.shape[1] != num_actions:
        raise PolicyFileError(
            f"{filepath}: policy has {values.shape[1]} actions, agent expects {num_actions}"
        )

    count, k = features.shape
    state_space = StateSpace(dimension=k if (k or count) else None)
    q_table = ValueTable(num_actions, initial_value)
    for row_features, row_values in zip(features, values):
        handle = state_space.canonicalize(row_features)
        if handle in q_table:
            raise PolicyFileError(
                f"{filepath}: duplicate state {row_features.tolist()}"
            )
        q_table.insert(handle, row_values)
    return state_space, q_table


def read_dims(filepath: Union[str, Path]) -> Tuple[int, int]:
    """
    Return the ``(feature_dimension, num_actions)`` recorded in ``filepath``.

    Raises:
        OSError: If the file cannot be opened
        PolicyFileError: If the header (or archive) is malformed
    """
    filepath = Path(filepath)
    if filepath.suffix == ".npz":
        features, values = _read_npz(filepath)
        return features.shape[1], values.shape[1]
    k, n, _ = _parse_header(filepath, _split_text(filepath)[0])
    return k, n


def _to_arrays(state_space: StateSpace, q_table: ValueTable) -> Tuple[np.ndarray, np.ndarray]:
    k = state_space.dimension or 0
    n = q_table.num_actions
    features = np.empty((len(state_space), k), dtype=np.float64)
    values = np.empty((len(state_space), n), dtype=np.float64)
    for handle in state_space:
        features[handle] = state_space.features(handle)
        row = q_table.get(handle)
        values[handle] = q_table.initial_value if row is None else row
    return features, values


def _split_text(filepath: Path) -> Tuple[Dict[str, str], List[str]]:
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except UnicodeDecodeError as e:
        raise PolicyFileError(f"{filepath}: not a text policy file ({e})") from e

    header: Dict[str, str] = {}
    body = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("#"):
            key, _, rest = stripped.lstrip("#").strip().partition(" ")
            header[key] = rest.strip()
        elif stripped:
            body.append(stripped)
    return header, body


def _parse_header(filepath: Path, header: Dict[str, str]) -> Tuple[int, int, int]:
    if "dims" not in header or "states" not in header:
        raise PolicyFileError(f"{filepath}: missing 'dims' or 'states' header")
    try:
        k, n = (int(tok) for tok in header["dims"].split())
        count = int(header["states"])
    except ValueError as e:
        raise PolicyFileError(f"{filepath}: invalid header ({e})") from e
    if k < 0 or n <= 0 or count < 0:
        raise PolicyFileError(f"{filepath}: invalid header dims={k},{n} states={count}")
    return k, n, count


def _read_text(filepath: Path) -> Tuple[np.ndarray, np.ndarray]:
    header, body = _split_text(filepath)
    k, n, count = _parse_header(filepath, header)
    if len(body) != count:
        raise PolicyFileError(
            f"{filepath}: header declares {count} states, found {len(body)} records"
        )
    if count == 0:
        return np.empty((0, k)), np.empty((0, n))

    try:
        table = np.loadtxt(io.StringIO("\n".join(body)), dtype=np.float64, ndmin=2)
    except ValueError as e:
        raise PolicyFileError(f"{filepath}: malformed record ({e})") from e
    if table.shape[1] != k + n:
        raise PolicyFileError(
            f"{filepath}: records must have {k + n} fields, got {table.shape[1]}"
        )
    return table[:, :k], table[:, k:]


def _read_npz(filepath: Path) -> Tuple[np.ndarray, np.ndarray]:
    try:
        archive = np.load(filepath, allow_pickle=False)
    except (ValueError, zipfile.BadZipFile, EOFError) as e:
        raise PolicyFileError(f"{filepath}: not a policy archive ({e})") from e
    if not hasattr(archive, "files"):
        raise PolicyFileError(f"{filepath}: not a policy archive")

    with archive:
        try:
            dims = archive["dims"]
            features = np.asarray(archive["features"], dtype=np.float64)
            values = np.asarray(archive["values"], dtype=np.float64)
        except (KeyError, ValueError, zipfile.BadZipFile) as e:
            raise PolicyFileError(f"{filepath}: incomplete policy archive ({e})") from e

    if dims.shape != (2,) or features.ndim != 2 or values.ndim != 2:
        raise PolicyFileError(f"{filepath}: malformed policy archive")
    k, n = int(dims[0]), int(dims[1])
    if features.shape != (features.shape[0], k) or values.shape != (features.shape[0], n):
        raise PolicyFileError(
            f"{filepath}: arrays do not match dims ({k}, {n})"
        )
    return features, values
