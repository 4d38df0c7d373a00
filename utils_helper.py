import numpy as np
import cv2


""" 误差计算模块（代数误差、Sampson） """
def getAlgebraicError(points, M):
    """ 每对匹配点的对极约束残差 |(x1, y1, 1) * M * (x0, y0, 1)'| """
    points = np.asarray(points, dtype=np.float64)
    point_number = np.shape(points)[0]
    src_x = np.c_[points[:, 0:2], np.ones(point_number)]
    dst_x = np.c_[points[:, 2:4], np.ones(point_number)]
    return np.abs(np.sum(np.dot(dst_x, M) * src_x, axis=1))


def getSampsonError(points, M):
    error = 0
    point_number = np.shape(points)[0]
    for i in range(point_number):
        src_x = np.hstack((points[i, 0:2], [1]))
        dst_x = np.hstack((points[i, 2:4], [1]))

        f_x1 = np.dot(M, src_x)
        x2_f = np.dot(dst_x.T, M)
        x2_f_x1 = np.dot(x2_f, src_x)
        error += x2_f_x1 ** 2 / (f_x1[0] ** 2 + f_x1[1] ** 2 + x2_f[0] ** 2 + x2_f[1] ** 2)
    return error / point_number


""" 合成数据模块 """
def generateSyntheticCorrespondences(M, point_number, rng=None, scale=1.0):
    """ 生成精确满足对极约束的匹配点

    x0 在 [-scale, scale] 内随机取点，x1 为另一随机点到对极线 M*x0 的垂足

    参数
    --------
    M : numpy
        3x3 基础矩阵
    point_number : int
        生成的匹配点数目
    rng : numpy.random.Generator 可选
        随机数发生器
    scale : float
        坐标范围

    返回
    --------
    numpy
        point_number x 4 的点集 (x0, y0, x1, y1)
    """
    if rng is None:
        rng = np.random.default_rng()
    points = np.zeros([point_number, 4])
    i = 0
    while i < point_number:
        src_x = rng.uniform(-scale, scale, 2)
        line = np.dot(M, np.hstack((src_x, [1])))
        norm = line[0] ** 2 + line[1] ** 2
        # 对极线退化（x0 位于对极点附近）时重新取点
        if norm < 1e-12:
            continue
        p = rng.uniform(-scale, scale, 2)
        d = (line[0] * p[0] + line[1] * p[1] + line[2]) / norm
        dst_x = p - d * line[0:2]
        points[i] = np.r_[src_x, dst_x]
        i += 1
    return points


""" 对比信息绘制模块 """
def draw_epipolar_lines(img, lines, pts, color=(0, 255, 0)):
    """ 在图像上绘制对极线与对应点，lines 为 cv2.computeCorrespondEpilines 的输出 """
    h, w = img.shape[0:2]
    img_out = img.copy()
    for line, pt in zip(lines.reshape(-1, 3), pts.reshape(-1, 2)):
        a, b, c = line
        if abs(b) < 1e-12:
            continue
        # 超出图像很远的端点截断，避免 cv2 整数溢出
        y_start = int(np.clip(-c / b, -10 * h, 10 * h))
        y_end = int(np.clip(-(c + a * (w - 1)) / b, -10 * h, 10 * h))
        x_start, x_end = 0, w - 1
        img_out = cv2.line(img_out, (x_start, y_start), (x_end, y_end), color, 1, cv2.LINE_AA)
        img_out = cv2.circle(img_out, (int(round(pt[0])), int(round(pt[1]))), 4, color, -1)
    return img_out
