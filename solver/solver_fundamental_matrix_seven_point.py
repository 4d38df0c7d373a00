import math as m

import numpy as np
from numpy.polynomial import polynomial as P

from model import FundamentalMatrix
from solver.solver_engine import SolverEngine

# 复数根虚部小于该阈值时视为实根
IMAGINARY_THRESHOLD = 1e-12


def buildCoefficientMatrix(points, sample, sample_number, weights=None):
	""" 构成线性系统：第 i 行表示方程 (x1, y1, 1) * F * (x0, y0, 1)' = 0

	参数
	----------
	points : numpy
		输入的数据点集，前四列为 x0 y0 x1 y1
	sample : list
		用于估计模型的样本点序号列表
	sample_number : int
		参与构造的样本点数目
	weights : list 可选
		数据点集中点的对应权重

	返回
	----------
	numpy
		sample_number x 9 的参数矩阵 A
	"""
	coefficients = np.zeros([sample_number, 9])
	for i in range(sample_number):
		sample_idx = sample[i]
		weight = 1.0 if weights is None else weights[sample_idx]

		# 取点的坐标
		point = points[sample_idx]
		x0 = point[0]
		y0 = point[1]
		x1 = point[2]
		y1 = point[3]

		coefficients[i] = np.array(
			[x1 * x0, x1 * y0, x1, y1 * x0, y1 * y0, y1, x0, y0, 1.0]) * weight
	return coefficients


def findNullSpaceBasis(coefficients):
	""" 求 A 的零空间基 f1, f2

	A*(f11 f12 ... f33)' = 0 is singular (7 equations for 9 variables), so
	the solution is linear subspace of dimensionality 2.
	对 A'A 做特征分解比直接分解 A 更快，两个最小特征值对应的特征向量
	即 A 的最后两个右奇异向量
	"""
	# eigh 返回升序特征值
	_, eigenvectors = np.linalg.eigh(np.dot(coefficients.T, coefficients))
	f1 = eigenvectors[:, 1].copy()
	f2 = eigenvectors[:, 0].copy()
	return f1, f2


def buildCubicCoefficients(f1, f2):
	""" 由 det(lambda*f1 + (1-lambda)*f2) = 0 求三次方程系数

	返回
	----------
	numpy, numpy
		常数项在前的四个系数 c，以及重新参数化后的 f1 (f1 - f2)
	"""
	# f1, f2 is a basis => lambda*f1 + mu*f2 is an arbitrary f. matrix.
	# as it is determined up to a scale, normalize lambda & mu (lambda + mu = 1),
	# so f ~ lambda*f1 + (1 - lambda)*f2.
	c = np.zeros(4)
	f1 = f1 - f2

	t0 = f2[4] * f2[8] - f2[5] * f2[7]
	t1 = f2[3] * f2[8] - f2[5] * f2[6]
	t2 = f2[3] * f2[7] - f2[4] * f2[6]

	c[0] = f2[0] * t0 - f2[1] * t1 + f2[2] * t2

	c[1] = f1[0] * t0 - f1[1] * t1 + f1[2] * t2 -\
		f1[3] * (f2[1] * f2[8] - f2[2] * f2[7]) +\
		f1[4] * (f2[0] * f2[8] - f2[2] * f2[6]) -\
		f1[5] * (f2[0] * f2[7] - f2[1] * f2[6]) +\
		f1[6] * (f2[1] * f2[5] - f2[2] * f2[4]) -\
		f1[7] * (f2[0] * f2[5] - f2[2] * f2[3]) +\
		f1[8] * (f2[0] * f2[4] - f2[1] * f2[3])

	t0 = f1[4] * f1[8] - f1[5] * f1[7]
	t1 = f1[3] * f1[8] - f1[5] * f1[6]
	t2 = f1[3] * f1[7] - f1[4] * f1[6]

	c[2] = f2[0] * t0 - f2[1] * t1 + f2[2] * t2 -\
		f2[3] * (f1[1] * f1[8] - f1[2] * f1[7]) +\
		f2[4] * (f1[0] * f1[8] - f1[2] * f1[6]) -\
		f2[5] * (f1[0] * f1[7] - f1[1] * f1[6]) +\
		f2[6] * (f1[1] * f1[5] - f1[2] * f1[4]) -\
		f2[7] * (f1[0] * f1[5] - f1[2] * f1[3]) +\
		f2[8] * (f1[0] * f1[4] - f1[1] * f1[3])

	c[3] = f1[0] * t0 - f1[1] * t1 + f1[2] * t2

	return c, f1


def findRealRoots(coefficients):
	""" 求多项式的实根，系数按常数项在前排列 """
	roots = P.polyroots(coefficients)
	real_roots = [root.real for root in roots if m.fabs(root.imag) < IMAGINARY_THRESHOLD]
	return sorted(real_roots)


def appendNormalizedModels(f1, f2, roots, models):
	""" 对每个实根构造基础矩阵，并归一化使 F(3,3) == 1

	参数
	----------
	f1, f2 : numpy
		重新参数化后的零空间基，F = lambda*f1 + f2
	roots : list
		三次方程的实根
	models : list
		输出的模型列表，只追加不清空

	返回
	----------
	int
		追加的模型数目
	"""
	epsilon = np.finfo(np.float64).eps
	model_number = 0
	for root in roots:
		lambda_ = root
		s = f1[8] * root + f2[8]

		# 无法归一化的根直接丢弃
		if m.fabs(s) <= epsilon:
			continue

		mu = 1.0 / s
		lambda_ *= mu

		f = np.ones(9)
		for i in range(8):
			f[i] = f1[i] * lambda_ + f2[i] * mu
		models.append(FundamentalMatrix(matrix=np.reshape(f, (3, 3))))
		model_number += 1
	return model_number


class SolverFundamentalMatrixSevenPoint(SolverEngine):
	""" 七点法求解基础矩阵模型参数 """

	def __init__(self):
		super().__init__()

	def returnMultipleModels(self):
		""" 确定是否有可能返回多个模型 """
		return True

	def sampleSize(self):
		""" 模型参数估计所需的最小样本数 """
		return 7

	def estimateModel(self,
					  points,
					  sample,
					  sample_number,
					  models,
					  weights=None):
		""" 从给定的七个样本点，拟合候选基础矩阵

		参数
		----------
		points : numpy
			输入的数据点集
		sample : list
			用于估计模型的样本点序号列表，为 None 时取前七个点
		sample_number : int
			样本点的数目，应为 7，由调用方保证
		models : list
			输出的模型列表，求得的 0 到 3 个模型追加在末尾
		weights : list 可选
			数据点集中点的对应权重

		返回
		----------
		bool
			实根数目是否有效；成功时也可能没有追加任何模型
		"""
		if sample is None:
			sample = [i for i in range(self.sampleSize())]

		''' 1. 构造参数矩阵 A '''
		coefficients = buildCoefficientMatrix(points, sample, self.sampleSize(), weights)

		''' 2. 求零空间基 '''
		f1, f2 = findNullSpaceBasis(coefficients)

		''' 3. 行列式约束的三次方程 '''
		c, f1 = buildCubicCoefficients(f1, f2)

		''' 4. 解三次方程；可以有1到3个根 '''
		real_roots = findRealRoots(c)
		if len(real_roots) < 1 or len(real_roots) > 3:
			return False

		''' 5. 对每个实根求解基础矩阵 '''
		appendNormalizedModels(f1, f2, real_roots, models)
		return True
