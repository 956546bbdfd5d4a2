"""
PCA reducer: mean-center an embedding matrix, take its SVD, and project every row onto the
top-k principal directions. Returns the projected data and a FittedProjection that can be
reused to transform new vectors or saved with joblib.

Principal directions are unique only up to sign; nothing here picks a canonical sign.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import joblib
import numpy as np
from sklearn.utils.extmath import randomized_svd

from .errors import DimensionError

N_COMPONENTS = 2
SVD_SOLVERS = ("full", "randomized")


@dataclass(frozen=True, eq=False)
class PrincipalBasis:
    """Right-singular vectors as rows of ``components`` (ordered by descending singular value)."""
    components: np.ndarray  # (m, d), m >= k
    singular_values: np.ndarray  # (r,), every singular value of the centered matrix that was computed


@dataclass(frozen=True, eq=False)
class FittedProjection:
    means: np.ndarray  # (d,)
    components: np.ndarray  # (k, d)
    singular_values: np.ndarray  # (k,)
    explained_variance_ratio: np.ndarray  # (k,)

    @property
    def n_components(self) -> int:
        return self.components.shape[0]

    def transform(self, X: np.ndarray) -> np.ndarray:
        """Project new vectors (shape (n, d)) into the fitted k-dimensional space."""
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if X.shape[1] != self.means.shape[0]:
            raise ValueError(
                f"Expected vectors of length {self.means.shape[0]}, got {X.shape[1]}"
            )
        return (X - self.means) @ self.components.T

    def save(self, path: str | Path) -> None:
        joblib.dump(self, path)

    @staticmethod
    def load(path: str | Path) -> "FittedProjection":
        obj = joblib.load(path)
        if not isinstance(obj, FittedProjection):
            raise TypeError(f"{path} does not contain a FittedProjection (got {type(obj).__name__})")
        return obj


def center(X: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Subtract the column-wise mean from every row.

    The mean is accumulated in float64 even when X is float32 (as provider embeddings often are).

    Returns:
        (centered, means) with shapes (n, d) and (d,), both float64.

    Raises:
        ValueError: If X is not 2-D or has no rows.
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2D matrix, got shape {X.shape}")
    if X.shape[0] == 0:
        raise ValueError("Cannot center an empty matrix (n = 0)")
    means = X.mean(axis=0, dtype=np.float64)
    return X - means, means


def decompose(
    centered: np.ndarray,
    k: int = N_COMPONENTS,
    *,
    svd_solver: str = "full",
    random_state: int | None = None,
    iterated_power: int = 4,
) -> PrincipalBasis:
    """
    Compute the principal directions of a centered matrix.

    Args:
        centered: (n, d) mean-centered matrix, e.g. the first output of center().
        k: Number of directions that will be used downstream. Must satisfy 1 <= k <= d.
        svd_solver: 'full' (default) for the exact LAPACK SVD; 'randomized' for
            scikit-learn's randomized_svd, used only when min(n, d) > k.
        random_state: Seed for the randomized solver.
        iterated_power: Power iterations for the randomized solver (default 4).

    Returns:
        PrincipalBasis with at least k orthonormal rows, ordered by descending singular value.
        When n < k the full set of d right-singular vectors is returned, so a single sample
        (or any all-zero matrix) still gets a valid orthonormal basis.

    Raises:
        DimensionError: If d < k.
        ValueError: If k < 1 or svd_solver is unknown.
    """
    if svd_solver not in SVD_SOLVERS:
        raise ValueError(f"svd_solver must be one of {SVD_SOLVERS}, got {svd_solver!r}")
    if k < 1:
        raise ValueError(f"k must be >= 1, got k={k}")
    n, d = centered.shape
    if d < k:
        raise DimensionError(expected=k, actual=d)

    if svd_solver == "randomized" and min(n, d) > k:
        _, s, vt = randomized_svd(
            centered,
            n_components=k,
            n_iter=iterated_power,
            random_state=random_state,
        )
        return PrincipalBasis(components=vt, singular_values=s)

    # Thin SVD unless there are fewer rows than requested directions.
    _, s, vt = np.linalg.svd(centered, full_matrices=n < k)
    return PrincipalBasis(components=vt, singular_values=s)


def project(centered: np.ndarray, basis: PrincipalBasis, k: int = N_COMPONENTS) -> np.ndarray:
    """Project every centered row onto the first k principal directions. Row order is preserved."""
    return centered @ basis.components[:k].T


def _explained_variance_ratio(centered: np.ndarray, singular_values: np.ndarray, k: int) -> np.ndarray:
    # Total variance is the squared Frobenius norm; the randomized solver only returns k values.
    total = float(np.sum(centered ** 2))
    ratio = np.zeros(k, dtype=np.float64)
    if total > 0:
        top = singular_values[:k] ** 2 / total
        ratio[: top.shape[0]] = top
    return ratio


def reduce_pca(
    X: np.ndarray,
    k: int = N_COMPONENTS,
    random_state: int | None = None,
    *,
    svd_solver: str = "full",
    iterated_power: int = 4,
) -> tuple[np.ndarray, FittedProjection]:
    """
    Center X, decompose it, and project onto k principal directions.

    Args:
        X: Embedding matrix of shape (n, d) with n >= 1, e.g. SampleTable.matrix().
        k: Number of output dimensions. Must satisfy 1 <= k <= d.
        random_state: Seed for the randomized solver.
        svd_solver: 'full' or 'randomized' (see decompose()).
        iterated_power: Power iterations for the randomized solver.

    Returns:
        (Z, fitted) where Z is np.ndarray of shape (n, k) and fitted is the FittedProjection.
        Use fitted.transform(new_X) to place new vectors in the same plane.

    Raises:
        DimensionError: If d < k.
    """
    centered, means = center(X)
    basis = decompose(
        centered,
        k,
        svd_solver=svd_solver,
        random_state=random_state,
        iterated_power=iterated_power,
    )
    Z = project(centered, basis, k)
    s = np.zeros(k, dtype=np.float64)
    top = basis.singular_values[:k]
    s[: top.shape[0]] = top
    fitted = FittedProjection(
        means=means,
        components=basis.components[:k].copy(),
        singular_values=s,
        explained_variance_ratio=_explained_variance_ratio(centered, basis.singular_values, k),
    )
    return Z, fitted
