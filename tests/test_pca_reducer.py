import os
import tempfile
import unittest

import numpy as np

from keyword_graph.errors import DimensionError
from keyword_graph.pca_reducer import FittedProjection, center, decompose, project, reduce_pca


def assert_close_up_to_sign(testcase, a, b, atol=1e-8):
    """Columns of a and b must match, each column possibly negated."""
    testcase.assertEqual(a.shape, b.shape)
    for j in range(a.shape[1]):
        same = np.allclose(a[:, j], b[:, j], atol=atol)
        flipped = np.allclose(a[:, j], -b[:, j], atol=atol)
        testcase.assertTrue(same or flipped, f"column {j} differs beyond a sign flip")


def _structured(n=50, d=8, seed=0):
    rng = np.random.default_rng(seed)
    scales = np.array([10.0, 5.0] + [1.0] * (d - 2))
    return rng.normal(size=(n, d)) * scales + 3.0


class TestCenter(unittest.TestCase):
    def test_columns_have_zero_mean(self):
        X = _structured()
        centered, means = center(X)
        np.testing.assert_allclose(centered.mean(axis=0), 0.0, atol=1e-12)
        np.testing.assert_allclose(means, X.mean(axis=0))

    def test_float32_input_is_centered_in_float64(self):
        X = _structured().astype(np.float32)
        centered, means = center(X)
        self.assertEqual(centered.dtype, np.float64)
        self.assertEqual(means.dtype, np.float64)
        np.testing.assert_allclose(means, X.astype(np.float64).mean(axis=0), rtol=0, atol=1e-12)

    def test_single_sample_centers_to_zero(self):
        centered, _ = center(np.array([[0.3, -1.5, 2.0]]))
        np.testing.assert_array_equal(centered, np.zeros((1, 3)))

    def test_empty_matrix_rejected(self):
        with self.assertRaises(ValueError):
            center(np.zeros((0, 4)))


class TestDecompose(unittest.TestCase):
    def test_orthonormal_and_ordered(self):
        centered, _ = center(_structured())
        basis = decompose(centered)
        V = basis.components[:2]
        np.testing.assert_allclose(V @ V.T, np.eye(2), atol=1e-10)
        self.assertTrue(np.all(np.diff(basis.singular_values) <= 1e-12))

    def test_too_few_dimensions(self):
        with self.assertRaises(DimensionError) as ctx:
            decompose(np.zeros((3, 1)))
        self.assertEqual(ctx.exception.expected, 2)
        self.assertEqual(ctx.exception.actual, 1)

    def test_zero_matrix_still_gives_orthonormal_basis(self):
        basis = decompose(np.zeros((1, 5)))
        self.assertGreaterEqual(basis.components.shape[0], 2)
        V = basis.components[:2]
        np.testing.assert_allclose(V @ V.T, np.eye(2), atol=1e-12)
        np.testing.assert_array_equal(basis.singular_values, 0.0)

    def test_unknown_solver(self):
        with self.assertRaises(ValueError):
            decompose(np.zeros((3, 3)), svd_solver="arpack")

    def test_randomized_matches_full_up_to_sign(self):
        centered, _ = center(_structured())
        full = project(centered, decompose(centered, svd_solver="full"))
        rand = project(centered, decompose(centered, svd_solver="randomized", random_state=0))
        assert_close_up_to_sign(self, full, rand, atol=1e-6)


class TestReducePca(unittest.TestCase):
    def test_cat_mouse_scenario(self):
        X = np.array([[1.0, 0.0, 0.0, 0.0], [-1.0, 0.0, 0.0, 0.0]])
        Z, fitted = reduce_pca(X)
        self.assertEqual(Z.shape, (2, 2))
        self.assertAlmostEqual(abs(Z[0, 0]), 1.0, places=12)
        self.assertAlmostEqual(Z[0, 0], -Z[1, 0], places=12)
        self.assertAlmostEqual(Z[0, 1], 0.0, places=12)
        self.assertAlmostEqual(Z[1, 1], 0.0, places=12)
        np.testing.assert_allclose(fitted.means, 0.0)
        np.testing.assert_allclose(fitted.explained_variance_ratio, [1.0, 0.0], atol=1e-12)

    def test_identical_vectors_project_to_origin(self):
        X = np.tile([0.1, 0.7, -0.3, 2.5], (5, 1))
        Z, _ = reduce_pca(X)
        np.testing.assert_allclose(Z, 0.0, atol=1e-12)

    def test_single_sample_projects_to_origin(self):
        Z, fitted = reduce_pca(np.array([[0.5, -0.25, 4.0]]))
        np.testing.assert_array_equal(Z, np.zeros((1, 2)))
        np.testing.assert_array_equal(fitted.explained_variance_ratio, [0.0, 0.0])

    def test_general_k(self):
        Z, fitted = reduce_pca(_structured(), k=3)
        self.assertEqual(Z.shape, (50, 3))
        self.assertEqual(fitted.n_components, 3)
        self.assertLessEqual(fitted.explained_variance_ratio.sum(), 1.0 + 1e-12)

    def test_projection_preserves_total_variance_of_top_directions(self):
        X = _structured()
        Z, fitted = reduce_pca(X)
        np.testing.assert_allclose(np.linalg.norm(Z, axis=0), fitted.singular_values, rtol=1e-10)

    def test_transform_reproduces_fit(self):
        X = _structured()
        Z, fitted = reduce_pca(X)
        np.testing.assert_allclose(fitted.transform(X), Z, atol=1e-10)
        np.testing.assert_allclose(fitted.transform(X[0]), Z[:1], atol=1e-10)
        with self.assertRaises(ValueError):
            fitted.transform(np.zeros((1, 3)))

    def test_save_and_load(self):
        X = _structured()
        Z, fitted = reduce_pca(X)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "basis.joblib")
            fitted.save(path)
            loaded = FittedProjection.load(path)
        np.testing.assert_allclose(loaded.transform(X), Z, atol=1e-10)


if __name__ == "__main__":
    unittest.main()
