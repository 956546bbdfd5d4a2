"""
Sample table: ordered (label, vector) pairs sharing one vector length.
Row order is preserved end-to-end and is the order of the output table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from .errors import DimensionMismatchError


def _as_vector(values: Sequence[float] | np.ndarray) -> np.ndarray:
    if (
        isinstance(values, np.ndarray)
        and values.dtype == np.float64
        and values.ndim == 1
        and not values.flags.writeable
    ):
        return values
    vec = np.array(values, dtype=np.float64).reshape(-1)
    vec.setflags(write=False)
    return vec


@dataclass(frozen=True, eq=False)
class Sample:
    label: str
    vector: np.ndarray

    def __post_init__(self) -> None:
        # Stored as a read-only 1-D float64 copy
        object.__setattr__(self, "vector", _as_vector(self.vector))


@dataclass(frozen=True, eq=False)
class SampleTable:
    samples: tuple[Sample, ...] = ()

    def __post_init__(self) -> None:
        samples = tuple(
            s if isinstance(s, Sample) else Sample(label=s[0], vector=s[1]) for s in self.samples
        )
        if samples:
            expected = samples[0].vector.shape[0]
            for s in samples[1:]:
                if s.vector.shape[0] != expected:
                    raise DimensionMismatchError(s.label, expected, s.vector.shape[0])
        object.__setattr__(self, "samples", samples)

    @property
    def n(self) -> int:
        return len(self.samples)

    @property
    def d(self) -> int:
        return self.samples[0].vector.shape[0] if self.samples else 0

    @property
    def labels(self) -> list[str]:
        return [s.label for s in self.samples]

    def matrix(self) -> np.ndarray:
        """Stack the vectors into an (n, d) float64 array. Empty tables give shape (0, 0)."""
        if not self.samples:
            return np.zeros((0, 0), dtype=np.float64)
        return np.vstack([s.vector for s in self.samples])

    def __len__(self) -> int:
        return self.n

    def __iter__(self):
        return iter(self.samples)


@dataclass(frozen=True)
class ResultRow:
    """One labeled 2-D coordinate, in the same position as its sample in the table."""
    label: str
    x: float
    y: float


def build_table(pairs: Iterable[tuple[str, Sequence[float] | np.ndarray]]) -> SampleTable:
    """
    Assemble a SampleTable from (label, vector) pairs.

    Vectors are copied to read-only float64 arrays. The first vector fixes d.

    Raises:
        DimensionMismatchError: If any vector's length differs from the first one's.
    """
    samples: list[Sample] = []
    expected: int | None = None
    for label, values in pairs:
        vec = _as_vector(values)
        if expected is None:
            expected = vec.shape[0]
        elif vec.shape[0] != expected:
            raise DimensionMismatchError(label, expected, vec.shape[0])
        samples.append(Sample(label=label, vector=vec))
    return SampleTable(tuple(samples))


def table_from_matrix(labels: Sequence[str], X: np.ndarray) -> SampleTable:
    """
    Pair each row of a 2-D embedding matrix (e.g. a saved .npy) with its label.

    Raises:
        ValueError: If X is not 2-D or the row count differs from len(labels).
    """
    X = np.asarray(X)
    if X.ndim != 2:
        raise ValueError(f"Embedding matrix must be 2D, got shape {X.shape}")
    if X.shape[0] != len(labels):
        raise ValueError(
            f"Embedding matrix has {X.shape[0]} rows but {len(labels)} labels were given."
        )
    return build_table(zip(labels, X))
