from time import time

import cv2
import matplotlib as mpl
import matplotlib.pyplot as plt
import numpy as np

import sevenpoint as sp
from utils_helper import *


def makeStereoScene(point_number, rng):
    """ 构造双目相机场景，返回真值基础矩阵与精确的匹配点集 """
    K = np.array([[800.0, 0.0, 320.0],
                  [0.0, 800.0, 240.0],
                  [0.0, 0.0, 1.0]])
    R, _ = cv2.Rodrigues(np.array([0.05, -0.1, 0.02]))
    t = np.array([1.0, 0.1, 0.05])

    # F = K^-T [t]x R K^-1
    t_x = np.array([[0, -t[2], t[1]],
                    [t[2], 0, -t[0]],
                    [-t[1], t[0], 0]])
    K_inv = np.linalg.inv(K)
    gt_F = np.dot(np.dot(K_inv.T, np.dot(t_x, R)), K_inv)
    gt_F /= gt_F[2, 2]

    # 随机三维点投影到两个相机
    X = np.c_[rng.uniform(-2, 2, point_number),
              rng.uniform(-1.5, 1.5, point_number),
              rng.uniform(4, 8, point_number)]
    x_src = np.dot(K, X.T).T
    x_dst = np.dot(K, (np.dot(R, X.T).T + t).T).T
    src_pts = x_src[:, 0:2] / x_src[:, 2:3]
    dst_pts = x_dst[:, 0:2] / x_dst[:, 2:3]
    return gt_F, src_pts, dst_pts


if __name__ == "__main__":
    rng = np.random.default_rng(2020)
    gt_F, src_pts, dst_pts = makeStereoScene(7, rng)
    points = np.c_[src_pts, dst_pts]
    h, w = 480, 640

    print(f"Matches number = {np.shape(points)[0]}", '\n')

    F_list = []
    for i in range(2):
        t = time()
        if i == 0:
            print('CV2-7POINT')
            F, _ = cv2.findFundamentalMat(src_pts, dst_pts, cv2.FM_7POINT)
        else:
            print('SEVEN-POINT')
            F, _ = sp.findFundamentalMat(src_pts, dst_pts)
        print('Elapsed time = ', time() - t)
        if F is None:
            print('No model found', '\n')
            F_list.append(None)
            continue
        candidates = np.reshape(F, (-1, 3, 3))
        print('Candidates number = ', np.shape(candidates)[0])
        for M in candidates:
            M = M / M[2, 2]
            print('Algebraic error = ', getAlgebraicError(points, M).max(),
                  ' Distance to ground truth = ', np.linalg.norm(M - gt_F))
        print()
        F_list.append(candidates)

    # 绘制真值模型与七点法候选模型的对极线
    if F_list[1] is not None:
        canvas = np.full((h, w, 3), 255, dtype=np.uint8)
        gt_lines = cv2.computeCorrespondEpilines(src_pts.reshape(-1, 1, 2), 1, gt_F)
        best = min(F_list[1], key=lambda M: np.linalg.norm(M - gt_F))
        lines = cv2.computeCorrespondEpilines(src_pts.reshape(-1, 1, 2), 1, best)

        plt.figure(figsize=(12, 5))
        mpl.rcParams.update({'font.size': 8})
        plt.subplot(1, 2, 1)
        plt.title("ground truth")
        plt.imshow(draw_epipolar_lines(canvas, gt_lines, dst_pts, (0, 160, 0)))
        plt.subplot(1, 2, 2)
        plt.title("seven-point")
        plt.imshow(draw_epipolar_lines(canvas, lines, dst_pts, (0, 0, 255)))
        plt.show()
