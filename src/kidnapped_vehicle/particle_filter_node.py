#!/usr/bin/env python3
'''
Runs the particle filter over a recorded kidnapped vehicle data set.
Feeds controls and observations timestep by timestep, evaluates the best
particle against ground truth and optionally writes the particle snapshots,
the per-step errors and plots the results in a second process.
'''

import argparse
import csv
import logging
import multiprocessing as mp
import os
import sys
import time
from dataclasses import dataclass, field

import numpy as np

from kidnapped_vehicle.data_io import read_data_set
from kidnapped_vehicle.helpers import compute_error
from kidnapped_vehicle.particle import LandmarkObs
from kidnapped_vehicle.particle_filter import ParticleFilter

logger = logging.getLogger(__name__)

# Defaults for the kidnapped vehicle data set
DELTA_T = 0.1
SENSOR_RANGE = 50.0
SIGMA_POS = [0.3, 0.3, 0.01]
SIGMA_LANDMARK = [0.3, 0.3]
NUM_PARTICLES = 100
MAX_TRANSLATION_ERROR = 1.0
MAX_YAW_ERROR = 0.05
PLOT_EVERY = 10


@dataclass
class NodeConfig:
    '''Parameters of a filter run.'''
    data_dir: str = 'data'
    num_particles: int = NUM_PARTICLES
    delta_t: float = DELTA_T
    sensor_range: float = SENSOR_RANGE
    sigma_pos: list = field(default_factory=lambda: list(SIGMA_POS))
    sigma_landmark: list = field(default_factory=lambda: list(SIGMA_LANDMARK))
    seed: int = None
    observation_noise: bool = True
    resampler: str = 'simple'
    output: str = None
    errors: str = None
    plot: bool = False
    max_translation_error: float = MAX_TRANSLATION_ERROR
    max_yaw_error: float = MAX_YAW_ERROR


class ParticleFilterNode:

    def __init__(self, config):
        self.config = config
        self.pf = ParticleFilter(config.num_particles, seed=config.seed)
        # The data simulation shares the filter generator so a seed fixes the whole run
        self.rng = self.pf.rng
        self.total_error = np.zeros(3)
        self.cum_mean_error = np.zeros(3)
        self.errors = []
        self.predicted_position = np.zeros((0, 3))
        self.data_queue = None
        self.plot_process = None
        if self.config.output and os.path.isfile(self.config.output):
            # Snapshots are appended, start from an empty file
            os.remove(self.config.output)


    def start_plotting(self):
        '''
        Create a separate process for plotting.
        '''
        self.data_queue = mp.Queue()
        self.plot_process = mp.Process(
            target=plot_data_process,
            args=(self.data_queue,))
        self.plot_process.start()


    def stop_plotting(self):
        if self.plot_process is None:
            return
        self.data_queue.put({'data': (), 'terminate_flag': True})
        self.plot_process.join()
        self.plot_process = None


    def noisy_observations(self, observations):
        '''
        Observations with simulated sensor noise.
        '''
        if not self.config.observation_noise:
            return list(observations)
        std_x, std_y = self.config.sigma_landmark
        return [
            LandmarkObs(obs.x + self.rng.normal(0.0, std_x), obs.y + self.rng.normal(0.0, std_y))
            for obs in observations]


    def process_timestep(self, timestep, controls, ground_truth, observations, map_landmarks):
        '''
        One filter cycle: init (first step) or prediction, weight update,
        resampling and evaluation.

        Output:
            errors of the best particle [x, y, yaw].
        '''
        cfg = self.config
        if not self.pf.is_initialized:
            # Coarse prior, e.g. GPS: ground truth with added noise
            gt_x, gt_y, gt_theta = ground_truth[timestep]
            sense = self.rng.normal([gt_x, gt_y, gt_theta], cfg.sigma_pos)
            self.pf.init(sense[0], sense[1], sense[2], cfg.sigma_pos)
        else:
            velocity, yaw_rate = controls[timestep - 1]
            self.pf.prediction(cfg.delta_t, cfg.sigma_pos, velocity, yaw_rate)

        self.pf.update_weights(
            cfg.sensor_range,
            cfg.sigma_landmark,
            self.noisy_observations(observations[timestep]),
            map_landmarks,
            record_associations=cfg.plot)

        best = self.pf.best_particle()
        weights = self.pf.weights()
        logger.debug('step %d: highest weight %.6g, average weight %.6g',
                     timestep, weights.max(), weights.mean())
        best_pose = best.pose()
        self.predicted_position = np.append(self.predicted_position, [best_pose], axis=0)

        self.pf.resample(cfg.resampler)

        # Evaluate the best particle of the weighted set
        error = compute_error(*ground_truth[timestep], *best_pose)
        self.total_error += error
        self.cum_mean_error = self.total_error / (timestep + 1)
        self.errors.append(np.concatenate([error, self.cum_mean_error]))
        if cfg.output:
            self.pf.write(cfg.output)
        return error


    def run(self, map_landmarks, controls, ground_truth, observations):
        '''
        Run the filter over every timestep.

        Output:
            True when the cumulative mean error stays within bounds.
        '''
        cfg = self.config
        start = time.time()
        if cfg.plot:
            self.start_plotting()
        try:
            for timestep in range(len(controls)):
                self.process_timestep(timestep, controls, ground_truth, observations, map_landmarks)
                if self.data_queue is not None and timestep % PLOT_EVERY == 0:
                    self.data_queue.put({
                        'data': (self.pf.get_plot_data(), self.predicted_position,
                                 ground_truth[:timestep + 1], map_landmarks),
                        'terminate_flag': False})
        finally:
            self.stop_plotting()
        runtime = time.time() - start

        if cfg.errors:
            self.write_errors(cfg.errors)
        logger.info('Cumulative mean weighted error: x %.4f y %.4f yaw %.4f',
                    *self.cum_mean_error)
        logger.info('Runtime (sec): %.2f', runtime)
        success = bool(
            self.cum_mean_error[0] <= cfg.max_translation_error
            and self.cum_mean_error[1] <= cfg.max_translation_error
            and self.cum_mean_error[2] <= cfg.max_yaw_error)
        if success:
            logger.info('Success! Your particle filter passed!')
        else:
            logger.info('Error too high: max translation %.2f, max yaw %.2f',
                        cfg.max_translation_error, cfg.max_yaw_error)
        return success


    def write_errors(self, filename):
        with open(filename, 'w', newline='') as file:
            writer = csv.writer(file, delimiter=',')
            writer.writerow(['step', 'error_x', 'error_y', 'error_yaw',
                             'cum_mean_x', 'cum_mean_y', 'cum_mean_yaw'])
            for step, row in enumerate(self.errors):
                writer.writerow([step] + list(row))


def plot_data_process(data_queue):
    '''
    Entry point for the separate process responsible for plotting.
    '''
    import matplotlib.pyplot as plt

    while True:
        data = data_queue.get()  # Get data from the queue
        if data['terminate_flag']:
            break
        (x, y, best_pose, sense_x, sense_y), predicted_position, ground_truth, map_landmarks = data['data']
        plt.cla()
        # Map landmarks
        plt.scatter(
            [lm.x for lm in map_landmarks],
            [lm.y for lm in map_landmarks],
            s=30, c='grey', marker='s', label='Landmarks')
        # Ground truth and best particle trajectory
        plt.plot(ground_truth[:, 0], ground_truth[:, 1], 'b', label='Ground truth')
        plt.plot(predicted_position[:, 0], predicted_position[:, 1], 'r', label='Best particle')
        # Particles
        plt.scatter(x, y, s=5, c='k', alpha=0.5)
        # Observations of the best particle
        plt.scatter(sense_x, sense_y, s=20, c='g', marker='x', label='Observations')
        # Arrow for the best particle heading
        arrow_length = 2.0
        plt.quiver(
            best_pose[0],
            best_pose[1],
            arrow_length * np.cos(best_pose[2]),
            arrow_length * np.sin(best_pose[2]),
            angles='xy',
            scale_units='xy',
            scale=1,
            color='r',
            width=0.005)
        plt.legend(loc='lower left')
        plt.pause(1e-3)
    plt.close()


def build_parser():
    parser = argparse.ArgumentParser(description='Kidnapped vehicle particle filter')
    parser.add_argument('-d', '--data-dir', default='data', help='Directory of the data set.')
    parser.add_argument('-n', '--num-particles', type=int, default=NUM_PARTICLES, help='Number of particles.')
    parser.add_argument('--delta-t', type=float, default=DELTA_T, help='Time between timesteps (s).')
    parser.add_argument('--sensor-range', type=float, default=SENSOR_RANGE, help='Sensor range (m).')
    parser.add_argument('--sigma-pos', type=float, nargs=3, default=SIGMA_POS,
                        metavar=('X', 'Y', 'THETA'), help='GPS and process noise std.')
    parser.add_argument('--sigma-landmark', type=float, nargs=2, default=SIGMA_LANDMARK,
                        metavar=('X', 'Y'), help='Landmark measurement noise std.')
    parser.add_argument('--seed', type=int, default=None, help='Seed of the random generator.')
    parser.add_argument('--no-observation-noise', action='store_true',
                        help='Use the observations as recorded.')
    parser.add_argument('-s', '--selective-resample', action='store_true',
                        help='Resample only when the effective sample size is low.')
    parser.add_argument('-o', '--output', default=None, help='Append particle snapshots to this file.')
    parser.add_argument('-e', '--errors', default=None, help='Write per step errors to this CSV file.')
    parser.add_argument('-p', '--plot', action='store_true', help='Plot the filter while running.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging.')
    return parser


def load_parameters(args):
    '''
    Build the run configuration from the parsed command line.
    '''
    config = NodeConfig(
        data_dir=args.data_dir,
        num_particles=args.num_particles,
        delta_t=args.delta_t,
        sensor_range=args.sensor_range,
        sigma_pos=list(args.sigma_pos),
        sigma_landmark=list(args.sigma_landmark),
        seed=args.seed,
        observation_noise=not args.no_observation_noise,
        resampler='selective' if args.selective_resample else 'simple',
        output=args.output,
        errors=args.errors,
        plot=args.plot)
    logger.info('Data directory:   %s', config.data_dir)
    logger.info('Particles:        %d', config.num_particles)
    logger.info('Resample method:  %s',
                'Selective Resampling' if config.resampler == 'selective' else 'Every iteration')
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    config = load_parameters(args)
    try:
        data = read_data_set(config.data_dir)
    except (OSError, ValueError) as e:
        logger.error('Could not read data set: %s', e)
        return 2
    node = ParticleFilterNode(config)
    return 0 if node.run(*data) else 1


if __name__ == '__main__':
    sys.exit(main())
