'''
Particle filter localization of a kidnapped vehicle in a map of known
point landmarks.
'''

from kidnapped_vehicle.measurement_model import EmptyCandidateSetError, MeasurementModel
from kidnapped_vehicle.motion_model import MotionModel
from kidnapped_vehicle.particle import Landmark, LandmarkObs, Particle
from kidnapped_vehicle.particle_filter import FilterNotInitializedError, ParticleFilter

__version__ = '1.0.0'

__all__ = [
    'EmptyCandidateSetError',
    'FilterNotInitializedError',
    'Landmark',
    'LandmarkObs',
    'MeasurementModel',
    'MotionModel',
    'Particle',
    'ParticleFilter',
]
