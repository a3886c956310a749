#!/usr/bin/env python3
'''
Monte Carlo localization of a vehicle in a map of known point landmarks
(Sequential Importance Resampling particle filter).
See chapter 8 of Probabilistic Robotics by Sebastian Thrun,
Wolfram Burgard and Dieter Fox.

Every timestep runs prediction -> update_weights -> resample, after a
single call to init with a coarse pose prior.
'''

import copy
import csv
import logging

import numpy as np

from kidnapped_vehicle.measurement_model import MeasurementModel
from kidnapped_vehicle.motion_model import MotionModel
from kidnapped_vehicle.particle import Particle

logger = logging.getLogger(__name__)

RESAMPLERS = ('simple', 'selective')


class FilterNotInitializedError(RuntimeError):
    '''
    Raised when the filter is used before init was called.
    '''


class ParticleFilter():

    def __init__(self, num_particles=100, seed=None, rng=None):
        '''
        Input:
            num_particles: number of pose hypotheses tracked.
            seed: seed of the random generator, ignored when rng is given.
            rng: numpy Generator used for every random draw of the filter.
        '''
        if int(num_particles) <= 0:
            raise ValueError('num_particles must be positive, got %r' % (num_particles,))
        self.num_particles = int(num_particles)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.particles = []
        self.is_initialized = False


    def init(self, x, y, theta, std):
        '''
        Create all particles from a Gaussian around the first pose estimate
        (e.g. GPS). Weights start at 1.0 and ids at 0..N-1.

        Input:
            x, y, theta: best guess of the vehicle pose.
            std: standard deviation of the guess [σx, σy, σθ].
        '''
        std = np.asarray(std, dtype=float)
        if std.shape != (3,):
            raise ValueError('std must hold 3 values [x, y, theta], got %r' % (std,))
        if np.any(std < 0):
            raise ValueError('standard deviations must be non-negative, got %r' % (std,))
        samples = self.rng.normal(
            loc=[x, y, theta], scale=std, size=(self.num_particles, 3))
        self.particles = [
            Particle(i, float(sample[0]), float(sample[1]), float(sample[2]))
            for i, sample in enumerate(samples)]
        self.is_initialized = True
        logger.debug('initialized %d particles around (%.3f, %.3f, %.3f)',
                     self.num_particles, x, y, theta)


    def prediction(self, delta_t, std_pos, velocity, yaw_rate):
        '''
        Move every particle with the control [velocity, yaw_rate] applied
        during delta_t, then add process noise.
        '''
        self._check_initialized('prediction')
        motion_model = MotionModel(std_pos, self.rng)
        for particle in self.particles:
            motion_model.sample_motion_model_velocity(particle, delta_t, velocity, yaw_rate)


    def update_weights(self, sensor_range, std_landmark, observations, map_landmarks,
                       record_associations=False):
        '''
        Recompute the weight of every particle from the observations made in
        the vehicle frame and the landmark map.

        Input:
            sensor_range: range of the sensor (m).
            std_landmark: measurement noise [σx, σy] (m).
            observations: sequence of LandmarkObs in the vehicle frame.
            map_landmarks: sequence of Landmark.
            record_associations: keep the associations on each particle.
        '''
        self._check_initialized('update_weights')
        measurement_model = MeasurementModel(std_landmark)
        for particle in self.particles:
            measurement_model.update_particle(
                particle,
                observations,
                map_landmarks,
                sensor_range,
                record_associations=record_associations)


    def resample(self, method='simple'):
        '''
        Draw a new particle set with replacement, with probability
        proportional to the weights. Two possible methods: always resample
        ('simple') or resample only when the effective sample size drops below
        half the particles ('selective').
        '''
        self._check_initialized('resample')
        if method not in RESAMPLERS:
            raise ValueError('unknown resampler %r, expected one of %s' % (method, RESAMPLERS))
        if method == 'selective':
            n_eff = self.effective_sample_size()
            if n_eff >= self.num_particles / 2:
                return
            logger.debug('effective sample size %.1f below %.1f, resampling',
                         n_eff, self.num_particles / 2)
        probabilities = self._resampling_distribution()
        new_indexes = self.rng.choice(
            self.num_particles,
            self.num_particles,
            replace=True,
            p=probabilities)
        # Independent copies, a particle drawn twice must not be shared
        self.particles = [copy.deepcopy(self.particles[index]) for index in new_indexes]


    def _resampling_distribution(self):
        '''
        Normalized weights. If every weight vanished the filter diverged and
        all particles are drawn with equal probability.
        '''
        weights = self.weights()
        infinite = np.isinf(weights)
        if np.any(infinite):
            # Infinite weights share the whole mass
            return infinite / np.count_nonzero(infinite)
        largest = weights.max() if len(weights) else 0.0
        if not largest > 0.0:
            logger.warning('all particle weights are zero, resampling uniformly')
            return np.full(self.num_particles, 1.0 / self.num_particles)
        # Scaled by the largest weight so the sum cannot overflow
        scaled = weights / largest
        return scaled / scaled.sum()


    def weights(self):
        return np.array([particle.weight for particle in self.particles], dtype=float)


    def effective_sample_size(self):
        '''
        N_eff = 1 / Σ ŵ² of the normalized weights; N_eff = N for a uniform set.
        '''
        self._check_initialized('effective_sample_size')
        probabilities = self._resampling_distribution()
        return 1.0 / np.sum(probabilities ** 2)


    def best_particle(self):
        '''
        Particle with the highest weight (first one on ties).
        '''
        self._check_initialized('best_particle')
        return self.particles[int(np.argmax(self.weights()))]


    def weighted_mean_pose(self):
        '''
        Weighted average of the particle poses. The heading is averaged on the
        unit circle.
        '''
        self._check_initialized('weighted_mean_pose')
        probabilities = self._resampling_distribution()
        poses = np.array([particle.pose() for particle in self.particles])
        x = np.sum(poses[:, 0] * probabilities)
        y = np.sum(poses[:, 1] * probabilities)
        theta = np.arctan2(
            np.sum(np.sin(poses[:, 2]) * probabilities),
            np.sum(np.cos(poses[:, 2]) * probabilities))
        return np.array([x, y, theta])


    def write(self, filename):
        '''
        Append a snapshot of the particle poses, one "x y theta" line per
        particle in particle order.
        '''
        with open(filename, 'a', newline='') as file:
            writer = csv.writer(file, delimiter=' ')
            for particle in self.particles:
                writer.writerow([particle.x, particle.y, particle.theta])


    def get_plot_data(self):
        '''
        Get data to pass to the plotting process
        '''
        x = [particle.x for particle in self.particles]
        y = [particle.y for particle in self.particles]
        best = self.best_particle()
        return x, y, best.pose(), best.sense_x, best.sense_y


    def _check_initialized(self, operation):
        if not self.is_initialized:
            raise FilterNotInitializedError('%s called before init' % operation)


if __name__ == "__main__":
    pass
