import numpy as np
import pytest

import solver.solver_fundamental_matrix_seven_point as seven_point
from model import FundamentalMatrix
from solver import SolverFundamentalMatrixSevenPoint
from utils_helper import generateSyntheticCorrespondences, getAlgebraicError

# 整数项、秩为 2 且 F[2,2] != 0
GT_F = np.array([[1.0, 2.0, 3.0],
                 [4.0, 5.0, 6.0],
                 [7.0, 8.0, 9.0]])


@pytest.fixture
def points():
    return generateSyntheticCorrespondences(GT_F, 7, rng=np.random.default_rng(7))


def _estimate(points, sample=None, models=None):
    solver = SolverFundamentalMatrixSevenPoint()
    if models is None:
        models = []
    if sample is None:
        sample = list(range(7))
    success = solver.estimateModel(points, sample, 7, models)
    return success, models


def _isProportional(M, N, tol=1e-6):
    M = M / np.linalg.norm(M)
    N = N / np.linalg.norm(N)
    return min(np.linalg.norm(M - N), np.linalg.norm(M + N)) < tol


def test_sample_size_and_multiple_models():
    solver = SolverFundamentalMatrixSevenPoint()
    assert solver.sampleSize() == 7
    assert solver.returnMultipleModels()


def test_recovers_ground_truth(points):
    success, models = _estimate(points)

    assert success
    assert 1 <= len(models) <= 3
    assert any(_isProportional(model.descriptor, GT_F) for model in models)
    for model in models:
        assert isinstance(model, FundamentalMatrix)
        assert model.descriptor.shape == (3, 3)
        assert model.descriptor[2, 2] == 1.0
        assert getAlgebraicError(points, model.descriptor).max() < 1e-9


def test_uses_sample_indices_into_larger_table():
    rng = np.random.default_rng(11)
    points = generateSyntheticCorrespondences(GT_F, 20, rng=rng)
    # 额外的列被忽略
    points = np.c_[points, rng.uniform(size=(20, 2))]
    sample = [19, 3, 8, 0, 12, 5, 16]

    success, models = _estimate(points, sample=sample)

    assert success
    assert any(_isProportional(model.descriptor, GT_F) for model in models)
    for model in models:
        assert getAlgebraicError(points[sample], model.descriptor).max() < 1e-9


def test_sample_none_uses_first_rows(points):
    solver = SolverFundamentalMatrixSevenPoint()
    models = []
    assert solver.estimateModel(points, None, 7, models)
    _, expected = _estimate(points)
    assert len(models) == len(expected)


def test_appends_without_clearing(points):
    existing = FundamentalMatrix(np.eye(3))
    models = [existing]

    success, models = _estimate(points, models=models)

    assert success
    assert models[0] is existing
    assert 2 <= len(models) <= 4


def test_deterministic(points):
    _, first = _estimate(points)
    _, second = _estimate(points.copy())

    assert len(first) == len(second)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.descriptor, b.descriptor)


def test_unit_weights_do_not_change_models(points):
    solver = SolverFundamentalMatrixSevenPoint()
    weighted = []
    assert solver.estimateModel(points, list(range(7)), 7, weighted, weights=[1.0] * 7)
    _, plain = _estimate(points)

    assert len(weighted) == len(plain)
    for a, b in zip(weighted, plain):
        np.testing.assert_allclose(a.descriptor, b.descriptor)


def test_identical_rows_do_not_crash():
    points = np.tile(np.array([[0.3, -0.2, 0.5, 0.1]]), (7, 1))

    success, models = _estimate(points)

    assert isinstance(success, bool)
    assert 0 <= len(models) <= 3
    if not success:
        assert len(models) == 0
    for model in models:
        assert model.descriptor[2, 2] == 1.0


def test_degenerate_root_set_returns_false(points, monkeypatch):
    monkeypatch.setattr(seven_point, "findRealRoots", lambda coefficients: [])
    models = [FundamentalMatrix()]

    success, models = _estimate(points, models=models)

    assert not success
    assert len(models) == 1


def test_too_many_roots_returns_false(points, monkeypatch):
    monkeypatch.setattr(seven_point, "findRealRoots", lambda coefficients: [0.0, 1.0, 2.0, 3.0])

    success, models = _estimate(points)

    assert not success
    assert models == []


def test_all_roots_unnormalizable_still_succeeds(points, monkeypatch):
    monkeypatch.setattr(seven_point, "appendNormalizedModels",
                        lambda f1, f2, roots, models: 0)

    success, models = _estimate(points)

    assert success
    assert models == []


def test_build_coefficient_matrix_rows():
    points = np.array([[2.0, 3.0, 5.0, 7.0]])

    coefficients = seven_point.buildCoefficientMatrix(points, [0], 1)

    np.testing.assert_array_equal(
        coefficients[0], [10.0, 15.0, 5.0, 14.0, 21.0, 7.0, 2.0, 3.0, 1.0])


def test_build_coefficient_matrix_weights():
    points = np.array([[1.0, 1.0, 1.0, 1.0], [2.0, 3.0, 5.0, 7.0]])

    coefficients = seven_point.buildCoefficientMatrix(points, [1], 1, weights=[0.0, 2.0])

    np.testing.assert_array_equal(
        coefficients[0], [20.0, 30.0, 10.0, 28.0, 42.0, 14.0, 4.0, 6.0, 2.0])


def test_null_space_basis_solves_constraints(points):
    coefficients = seven_point.buildCoefficientMatrix(points, list(range(7)), 7)

    f1, f2 = seven_point.findNullSpaceBasis(coefficients)

    assert np.linalg.norm(np.dot(coefficients, f1)) < 1e-9
    assert np.linalg.norm(np.dot(coefficients, f2)) < 1e-9
    assert abs(np.dot(f1, f2)) < 1e-9


def test_cubic_coefficients_match_determinant():
    rng = np.random.default_rng(3)
    f1 = rng.normal(size=9)
    f2 = rng.normal(size=9)

    c, g1 = seven_point.buildCubicCoefficients(f1, f2)

    np.testing.assert_allclose(g1, f1 - f2)
    assert c[0] == pytest.approx(np.linalg.det(f2.reshape(3, 3)))
    assert c[3] == pytest.approx(np.linalg.det(g1.reshape(3, 3)))
    for lambda_ in (-1.5, 0.25, 2.0):
        expected = np.linalg.det((lambda_ * g1 + f2).reshape(3, 3))
        value = c[0] + c[1] * lambda_ + c[2] * lambda_ ** 2 + c[3] * lambda_ ** 3
        assert value == pytest.approx(expected)


def test_find_real_roots():
    # (x - 1)(x - 2)(x + 3) = x^3 - 7x + 6
    roots = seven_point.findRealRoots(np.array([6.0, -7.0, 0.0, 1.0]))
    np.testing.assert_allclose(roots, [-3.0, 1.0, 2.0])

    # (x - 2)(x^2 + 1) = x^3 - 2x^2 + x - 2
    roots = seven_point.findRealRoots(np.array([-2.0, 1.0, -2.0, 1.0]))
    np.testing.assert_allclose(roots, [2.0])

    assert seven_point.findRealRoots(np.zeros(4)) == []


def test_append_normalized_models_skips_zero_scale():
    f1 = np.zeros(9)
    f2 = np.zeros(9)
    f1[0], f1[8] = 1.0, 1.0
    f2[4], f2[8] = 1.0, -2.0
    models = []

    # lambda = 2 gives s = 0
    appended = seven_point.appendNormalizedModels(f1, f2, [2.0, 3.0], models)

    assert appended == 1
    assert len(models) == 1
    # s = 1, mu = 1, lambda = 3
    expected = np.array([[3.0, 0.0, 0.0],
                         [0.0, 1.0, 0.0],
                         [0.0, 0.0, 1.0]])
    np.testing.assert_allclose(models[0].descriptor, expected)
    assert models[0].descriptor[2, 2] == 1.0
