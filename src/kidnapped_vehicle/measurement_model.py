#!/usr/bin/env python3
'''
Measurement model for point landmarks observed in the vehicle frame.

The update of a single particle is a chain of pure steps:
observations -> map frame -> landmarks in range -> nearest neighbour
association -> Gaussian likelihood.
'''

import logging

import numpy as np
from scipy.spatial.distance import cdist

from kidnapped_vehicle.helpers import dist, log_multivariate_gaussian, transform_to_map
from kidnapped_vehicle.particle import LandmarkObs, landmark_array

logger = logging.getLogger(__name__)

# Largest weight stored on a particle
MAX_WEIGHT = np.finfo(float).max


class EmptyCandidateSetError(ValueError):
    '''
    Raised when observations have to be associated with an empty landmark set.
    '''


def landmarks_in_range(particle, landmarks, sensor_range):
    '''
    Map landmarks within sensor_range (inclusive) of the particle position.
    Order of the map is kept.
    '''
    lm = landmark_array(landmarks)
    if len(lm) == 0:
        return []
    distances = dist(particle.x, particle.y, lm[:, 1], lm[:, 2])
    return [landmarks[i] for i in np.flatnonzero(distances <= sensor_range)]


def transform_observations(particle, observations):
    '''
    Observations converted from the vehicle frame into the map frame from the
    point of view of the particle. The input list is left untouched.
    '''
    transformed = []
    for obs in observations:
        map_x, map_y = transform_to_map(particle.x, particle.y, particle.theta, obs.x, obs.y)
        transformed.append(LandmarkObs(float(map_x), float(map_y), obs.id))
    return transformed


def data_association(candidates, observations):
    '''
    Nearest neighbour association of map frame observations to candidate
    landmarks.

    Input:
        candidates: sequence of Landmark, must not be empty when there are
                    observations (range filtering is done by the caller).
        observations: sequence of LandmarkObs in the map frame.
    Output:
        list of Landmark, one per observation and in the same order. On equal
        distances the candidate that comes first wins.
    '''
    if len(observations) == 0:
        return []
    if len(candidates) == 0:
        raise EmptyCandidateSetError(
            'cannot associate %d observations without candidate landmarks' % len(observations))
    obs_xy = np.array([[obs.x, obs.y] for obs in observations], dtype=float)
    lm_xy = landmark_array(candidates)[:, 1:]
    distances = cdist(obs_xy, lm_xy)
    # argmin returns the first index among equal minima
    nearest = np.argmin(distances, axis=1)
    return [candidates[i] for i in nearest]


class MeasurementModel():
    def __init__(self, std_landmark):
        '''
        Input:
            std_landmark: measurement standard deviation [σx, σy] (meters).
        '''
        std_landmark = np.asarray(std_landmark, dtype=float)
        if std_landmark.shape != (2,):
            raise ValueError('std_landmark must hold 2 values [x, y], got %r' % (std_landmark,))
        if np.any(std_landmark <= 0):
            raise ValueError('measurement standard deviations must be positive, got %r' % (std_landmark,))
        self.std_x, self.std_y = std_landmark


    def compute_importance_weight(self, associated, transformed):
        '''
        Product of the Gaussian likelihoods of every observation given its
        associated landmark. No observation gives the neutral weight 1.0.
        The product is summed in log space and capped at the largest float
        so many sharp likelihoods cannot overflow.
        '''
        if len(transformed) == 0:
            return 1.0
        difference = np.array(
            [[lm.x - obs.x, lm.y - obs.y] for lm, obs in zip(associated, transformed)])
        log_likelihoods = log_multivariate_gaussian(
            difference[:, 0], difference[:, 1], self.std_x, self.std_y)
        with np.errstate(over='ignore'):
            weight = np.exp(np.sum(log_likelihoods))
        return float(min(weight, MAX_WEIGHT))


    def update_particle(self, particle, observations, landmarks, sensor_range,
                        record_associations=False):
        '''
        Recompute the weight of a particle from scratch.

        Input:
            particle: Particle() object to be updated.
            observations: sequence of LandmarkObs in the vehicle frame.
            landmarks: full map, sequence of Landmark.
            sensor_range: maximum distance at which landmarks are observed.
            record_associations: store the matched ids and sensed coordinates
                                 on the particle.
        Output:
            the new weight.
        '''
        candidates = landmarks_in_range(particle, landmarks, sensor_range)
        transformed = transform_observations(particle, observations)
        if len(transformed) > 0 and len(candidates) == 0:
            # Observations that no landmark can explain: particle is implausible
            logger.debug('particle %s has no landmark within %.2f m', particle.id, sensor_range)
            particle.weight = 0.0
            particle.clear_associations()
            return particle.weight
        associated = data_association(candidates, transformed)
        particle.weight = self.compute_importance_weight(associated, transformed)
        if record_associations:
            particle.set_associations(
                [lm.id for lm in associated],
                [obs.x for obs in transformed],
                [obs.y for obs in transformed])
        return particle.weight


if __name__ == '__main__':
    pass
