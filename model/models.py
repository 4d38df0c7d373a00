import numpy as np


class Model:
    """ 最小求解器输出的模型基类 """

    def __init__(self):
        self.descriptor = None


class FundamentalMatrix(Model):
    """ 两视图对极几何的基础矩阵模型

    descriptor 为按行排列的 3x3 矩阵，只确定到一个尺度因子
    """

    def __init__(self, matrix=None):
        super().__init__()
        if matrix is None:
            matrix = np.zeros([3, 3])
        self.descriptor = np.reshape(np.asarray(matrix, dtype=np.float64), (3, 3))
