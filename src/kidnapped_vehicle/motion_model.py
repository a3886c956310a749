#!/usr/bin/env python3
'''
Velocity motion model for a vehicle moving on the plane:
    Vehicle state: [x, y, θ]
    Control: [v, ω] applied during delta_t.
'''

import numpy as np


# Below this yaw rate the vehicle is assumed to drive in a straight line
YAW_RATE_EPSILON = 1e-4


def arc_motion(x, y, theta, delta_t, velocity, yaw_rate):
    '''
    Exact motion along a circular arc of radius v/ω.
    '''
    vw_ratio = velocity / yaw_rate
    theta_est = theta + yaw_rate * delta_t
    x_est = x + vw_ratio * (np.sin(theta_est) - np.sin(theta))
    y_est = y + vw_ratio * (np.cos(theta) - np.cos(theta_est))
    return x_est, y_est, theta_est


def straight_motion(x, y, theta, delta_t, velocity, yaw_rate):
    '''
    Limit of the arc motion for ω → 0.
    '''
    x_est = x + velocity * delta_t * np.cos(theta)
    y_est = y + velocity * delta_t * np.sin(theta)
    theta_est = theta + yaw_rate * delta_t
    return x_est, y_est, theta_est


class MotionModel():
    def __init__(self, std_pos, rng):
        '''
        Input:
            std_pos: process noise standard deviation [σx, σy, σθ]
                     (in meters / rad).
            rng: numpy Generator shared with the rest of the filter.
        '''
        std_pos = np.asarray(std_pos, dtype=float)
        if std_pos.shape != (3,):
            raise ValueError('std_pos must hold 3 values [x, y, theta], got %r' % (std_pos,))
        if np.any(std_pos < 0):
            raise ValueError('standard deviations must be non-negative, got %r' % (std_pos,))
        self.parameters = std_pos
        self.rng = rng


    def sample_real_model_velocity(self, x, y, theta, delta_t, velocity, yaw_rate):
        '''
        Next state X_t from current state X_t-1 and control U_t without
        added motion noise.

        Output:
            [x_est, y_est, theta_est]
        '''
        # Avoid zero denominators
        if abs(yaw_rate) > YAW_RATE_EPSILON:
            x_est, y_est, theta_est = arc_motion(x, y, theta, delta_t, velocity, yaw_rate)
        else:
            x_est, y_est, theta_est = straight_motion(x, y, theta, delta_t, velocity, yaw_rate)
        return [x_est, y_est, theta_est]


    def sample_motion_model_velocity(self, particle, delta_t, velocity, yaw_rate):
        '''
        Move a particle from X_t-1 to X_t with control U_t and add process
        noise, drawn independently for this particle and each axis.

        Input:
            particle: Particle() object to be updated in place.
            delta_t: time elapsed since the last prediction (s).
            velocity, yaw_rate: control input U_t (m/s, rad/s).
        Output:
            None.
        '''
        x_t = self.sample_real_model_velocity(
            particle.x,
            particle.y,
            particle.theta,
            delta_t,
            velocity,
            yaw_rate)
        noise = self.sample(self.parameters)
        particle.x = float(x_t[0] + noise[0])
        particle.y = float(x_t[1] + noise[1])
        particle.theta = float(x_t[2] + noise[2])


    def sample(self, std):
        '''
        Zero mean Gaussian noise with the given per-axis standard deviation.
        '''
        return self.rng.normal(0.0, std)


if __name__ == '__main__':
    pass
