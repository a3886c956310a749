#!/usr/bin/env python3
'''
Readers for the kidnapped vehicle data set. All files are plain text with
whitespace separated columns:

    map_data.txt          x y id          (one landmark per line)
    control_data.txt      velocity yaw_rate
    gt_data.txt           x y theta
    observation/observations_000001.txt, ...
                          x y             (vehicle frame, one per line)
'''

import os

import numpy as np

from kidnapped_vehicle.particle import Landmark, LandmarkObs

MAP_FILE = 'map_data.txt'
CONTROL_FILE = 'control_data.txt'
GROUND_TRUTH_FILE = 'gt_data.txt'
OBSERVATION_DIR = 'observation'
OBSERVATION_PATTERN = 'observations_%06d.txt'


def _read_rows(filename, n_columns):
    '''
    Parse a whitespace separated file into a list of float rows.
    Blank lines are skipped.
    '''
    rows = []
    with open(filename, 'r') as file:
        for line_number, line in enumerate(file, start=1):
            fields = line.split()
            if not fields:
                continue
            if len(fields) < n_columns:
                raise ValueError('%s:%d: expected %d columns, got %d' % (
                    filename, line_number, n_columns, len(fields)))
            try:
                rows.append([float(field) for field in fields[:n_columns]])
            except ValueError:
                raise ValueError('%s:%d: invalid number in %r' % (
                    filename, line_number, line.strip())) from None
    return rows


def read_map_data(filename):
    '''
    Landmark map, list of Landmark(id, x, y).
    '''
    return [Landmark(int(row[2]), row[0], row[1]) for row in _read_rows(filename, 3)]


def read_control_data(filename):
    '''
    Control inputs, list of (velocity, yaw_rate).
    '''
    return [(row[0], row[1]) for row in _read_rows(filename, 2)]


def read_gt_data(filename):
    '''
    Ground truth poses as an (T, 3) array of [x, y, theta].
    '''
    rows = _read_rows(filename, 3)
    return np.array(rows, dtype=float).reshape(-1, 3)


def read_landmark_data(filename):
    '''
    Observations of one timestep, list of LandmarkObs in the vehicle frame.
    '''
    return [LandmarkObs(row[0], row[1]) for row in _read_rows(filename, 2)]


def observation_filename(data_dir, timestep):
    '''
    Observation file of a timestep, numbered from 1.
    '''
    return os.path.join(data_dir, OBSERVATION_DIR, OBSERVATION_PATTERN % (timestep + 1))


def read_data_set(data_dir):
    '''
    Load the map, controls, ground truth and every observation file of a data
    directory. The number of timesteps is given by the control file.

    Output:
        map_landmarks, controls, ground_truth, observations
    '''
    map_landmarks = read_map_data(os.path.join(data_dir, MAP_FILE))
    controls = read_control_data(os.path.join(data_dir, CONTROL_FILE))
    ground_truth = read_gt_data(os.path.join(data_dir, GROUND_TRUTH_FILE))
    if len(ground_truth) < len(controls):
        raise ValueError('%s has %d poses for %d controls' % (
            GROUND_TRUTH_FILE, len(ground_truth), len(controls)))
    observations = [
        read_landmark_data(observation_filename(data_dir, timestep))
        for timestep in range(len(controls))]
    return map_landmarks, controls, ground_truth, observations


if __name__ == '__main__':
    pass
