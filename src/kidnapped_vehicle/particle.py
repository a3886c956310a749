#!/usr/bin/env python3
'''
Particle with vehicle pose hypothesis, importance weight and the landmark
associations of its most recent measurement update.
Also holds the landmark and observation records exchanged with the map and
sensor data.
'''

from collections import namedtuple

import numpy as np


# Static map landmark, map frame
Landmark = namedtuple('Landmark', ['id', 'x', 'y'])


class LandmarkObs(namedtuple('LandmarkObs', ['x', 'y', 'id'])):
    '''
    Single sensor detection. Vehicle frame as received, map frame once
    transformed. The id stays None until the observation is associated.
    '''
    __slots__ = ()

    def __new__(cls, x, y, id=None):
        return super().__new__(cls, x, y, id)


def landmark_array(landmarks):
    '''
    Stack landmarks into an (M, 3) array of [id, x, y] rows.
    '''
    if len(landmarks) == 0:
        return np.zeros((0, 3))
    return np.array([[lm.id, lm.x, lm.y] for lm in landmarks], dtype=float)


class Particle():
    def __init__(self, id, x, y, theta, weight=1.0):
        self.initialize(id, x, y, theta, weight)

    def initialize(self, id, x, y, theta, weight=1.0):
        self.id = id
        self.x = x
        self.y = y
        self.theta = theta
        self.weight = weight  # Unnormalized importance weight
        # Diagnostics of the last update, one entry per observation
        self.associations = []
        self.sense_x = []
        self.sense_y = []

    def pose(self):
        return np.array([self.x, self.y, self.theta])

    def set_associations(self, associations, sense_x, sense_y):
        '''
        Replace the association diagnostics of this particle.

        Input:
            associations: landmark id matched to each observation.
            sense_x, sense_y: map frame coordinates of each observation.
        '''
        if not (len(associations) == len(sense_x) == len(sense_y)):
            raise ValueError(
                'associations, sense_x and sense_y must have the same length '
                '(%d, %d, %d)' % (len(associations), len(sense_x), len(sense_y)))
        self.associations = [int(a) for a in associations]
        self.sense_x = [float(v) for v in sense_x]
        self.sense_y = [float(v) for v in sense_y]

    def clear_associations(self):
        self.associations = []
        self.sense_x = []
        self.sense_y = []

    def get_associations(self):
        return _join(self.associations, '%d')

    def get_sense_x(self):
        return _join(self.sense_x, '%g')

    def get_sense_y(self):
        return _join(self.sense_y, '%g')

    def __repr__(self):
        return 'Particle(id=%r, x=%r, y=%r, theta=%r, weight=%r)' % (
            self.id, self.x, self.y, self.theta, self.weight)


def _join(values, fmt):
    # Space separated, no trailing separator
    return ' '.join(fmt % v for v in values)


if __name__ == '__main__':
    pass
