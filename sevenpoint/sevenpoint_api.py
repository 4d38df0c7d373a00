import numpy as np

from solver import SolverFundamentalMatrixSevenPoint


def __stackModels(models):
    """ 将模型列表按 OpenCV FM_7POINT 的格式纵向堆叠为 (3k)x3 矩阵 """
    if len(models) == 0:
        return None
    return np.vstack([model.descriptor for model in models])


""" 用于特征点匹配，七点法基础矩阵求解的函数 """
def findFundamentalMat(src_points, dst_points):
    """ 七点法基础矩阵求解

    参数
    --------
    src_points : numpy
        源图像特征点集合，7x2
    dst_points : numpy
        目标图像特征点集合，7x2

    返回
    --------
    numpy, list
        纵向堆叠的候选基础矩阵 (3k)x3（没有候选时为 None），候选模型列表
    """
    src_points = np.asarray(src_points, dtype=np.float64).reshape(-1, 2)
    dst_points = np.asarray(dst_points, dtype=np.float64).reshape(-1, 2)
    if np.shape(src_points) != np.shape(dst_points):
        print("源图像与目标图像点集数目不一致\n")
        return None, []

    solver = SolverFundamentalMatrixSevenPoint()
    sample_number = np.shape(src_points)[0]
    if sample_number != solver.sampleSize():
        print(f"七点法需要 {solver.sampleSize()} 对匹配点，输入为 {sample_number} 对\n")
        return None, []

    # 合并points到同个矩阵：
    # src在前两列，dst在后两列
    points = np.c_[src_points, dst_points]
    sample = [i for i in range(sample_number)]

    models = []
    if not solver.estimateModel(points, sample, sample_number, models):
        print("三次方程实根数目无效，求解失败\n")
        return None, []

    return __stackModels(models), models
