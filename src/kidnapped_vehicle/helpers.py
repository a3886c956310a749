#!/usr/bin/env python3
'''
Geometry and probability helpers shared by the motion and measurement models.
All functions accept scalars or numpy arrays of matching shape.
'''

import numpy as np


def dist(x1, y1, x2, y2):
    '''
    Euclidean distance between (x1, y1) and (x2, y2).
    '''
    return np.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2)


def transform_to_map(particle_x, particle_y, particle_theta, obs_x, obs_y):
    '''
    Rigid transform of an observation from the vehicle frame into the map
    frame, seen from a particle pose (rotation by theta, then translation).

    Input:
        particle_x, particle_y, particle_theta: particle pose in the map frame.
        obs_x, obs_y: observation in the vehicle frame.
    Output:
        (map_x, map_y)
    '''
    cos_theta = np.cos(particle_theta)
    sin_theta = np.sin(particle_theta)
    map_x = particle_x + obs_x * cos_theta - obs_y * sin_theta
    map_y = particle_y + obs_x * sin_theta + obs_y * cos_theta
    return map_x, map_y


def multivariate_gaussian(dx, dy, std_x, std_y):
    '''
    Density of a bivariate Gaussian with independent axes evaluated at the
    difference (dx, dy) between the predicted and the measured position.

        p = det(2πQ)^(-1/2) * exp(-1/2 * dᵀ Q⁻¹ d),   Q = diag(σx², σy²)
    '''
    Q = np.diag([std_x ** 2, std_y ** 2])
    normalizer = np.linalg.det(2 * np.pi * Q) ** (-0.5)
    exponent = (np.asarray(dx) ** 2) / (2 * Q[0, 0]) + (np.asarray(dy) ** 2) / (2 * Q[1, 1])
    return normalizer * np.exp(-exponent)


def log_multivariate_gaussian(dx, dy, std_x, std_y):
    '''
    Natural logarithm of multivariate_gaussian, finite for any finite
    difference.
    '''
    exponent = (np.asarray(dx) ** 2) / (2 * std_x ** 2) + (np.asarray(dy) ** 2) / (2 * std_y ** 2)
    return -np.log(2 * np.pi * std_x * std_y) - exponent


def normalize_angle(theta):
    '''
    Wrap an angle into [-pi, pi).
    '''
    return (theta + np.pi) % (2 * np.pi) - np.pi


def compute_error(gt_x, gt_y, gt_theta, pf_x, pf_y, pf_theta):
    '''
    Absolute error between the ground truth and an estimated pose.
    The yaw error is the shortest angular distance between both headings.

    Output:
        numpy array [error_x, error_y, error_yaw]
    '''
    error_x = abs(pf_x - gt_x)
    error_y = abs(pf_y - gt_y)
    error_yaw = abs(normalize_angle(pf_theta - gt_theta))
    return np.array([error_x, error_y, error_yaw])
