import numpy as np
import pytest

from kidnapped_vehicle import particle_filter_node
from kidnapped_vehicle.data_io import read_data_set
from kidnapped_vehicle.helpers import transform_to_map
from kidnapped_vehicle.motion_model import arc_motion, straight_motion

LANDMARKS = [(1, 10.0, 5.0), (2, -5.0, 12.0), (3, 3.0, 25.0), (4, 20.0, 20.0),
             (5, -10.0, -5.0), (6, 15.0, -8.0), (7, 30.0, 5.0)]


def _make_data_set(data_dir, steps=25, delta_t=0.1):
    '''
    Drive straight, then turn, with exact observations of every landmark.
    '''
    controls = [(6.0, 0.0)] * 10 + [(6.0, 0.3)] * (steps - 10)
    pose = (0.0, 0.0, 0.0)
    poses = [pose]
    for velocity, yaw_rate in controls[:-1]:
        motion = arc_motion if abs(yaw_rate) > 1e-4 else straight_motion
        pose = motion(*pose, delta_t, velocity, yaw_rate)
        poses.append(pose)
    (data_dir / 'observation').mkdir(parents=True)
    (data_dir / 'map_data.txt').write_text(
        ''.join('%f\t%f\t%d\n' % (x, y, i) for i, x, y in LANDMARKS))
    (data_dir / 'control_data.txt').write_text(''.join('%f %f\n' % c for c in controls))
    (data_dir / 'gt_data.txt').write_text(''.join('%.12f %.12f %.12f\n' % p for p in poses))
    for step, (x, y, theta) in enumerate(poses):
        lines = []
        for _, lx, ly in LANDMARKS:
            local = transform_to_map(0.0, 0.0, -theta, lx - x, ly - y)
            lines.append('%.12f %.12f\n' % local)
        (data_dir / 'observation' / ('observations_%06d.txt' % (step + 1))).write_text(''.join(lines))
    return poses


def test_run_on_data_set(tmp_path):
    _make_data_set(tmp_path / 'data')
    output = tmp_path / 'particles.txt'
    errors = tmp_path / 'errors.csv'
    status = particle_filter_node.main([
        '--data-dir', str(tmp_path / 'data'),
        '--num-particles', '50',
        '--sigma-pos', '0.05', '0.05', '0.001',
        '--seed', '3',
        '--no-observation-noise',
        '--output', str(output),
        '--errors', str(errors),
    ])
    assert status == 0
    # One snapshot of every particle per timestep
    assert len(output.read_text().splitlines()) == 25 * 50
    rows = errors.read_text().splitlines()
    assert rows[0].startswith('step,error_x')
    assert len(rows) == 26


def test_output_file_is_reset(tmp_path):
    _make_data_set(tmp_path / 'data', steps=12)
    output = tmp_path / 'particles.txt'
    output.write_text('stale\n')
    args = ['--data-dir', str(tmp_path / 'data'), '-n', '10', '--seed', '0', '-o', str(output)]
    particle_filter_node.main(args)
    assert 'stale' not in output.read_text()
    assert len(output.read_text().splitlines()) == 12 * 10


def test_selective_resampling_run(tmp_path):
    _make_data_set(tmp_path / 'data', steps=15)
    config = particle_filter_node.NodeConfig(
        data_dir=str(tmp_path / 'data'), num_particles=40, seed=5,
        sigma_pos=[0.05, 0.05, 0.001], resampler='selective')
    node = particle_filter_node.ParticleFilterNode(config)
    assert node.run(*read_data_set(config.data_dir))
    assert len(node.errors) == 15
    assert np.all(np.array(node.errors) >= 0.0)


def test_missing_data_set(tmp_path):
    assert particle_filter_node.main(['--data-dir', str(tmp_path / 'nowhere')]) == 2


def test_load_parameters():
    args = particle_filter_node.build_parser().parse_args(['-s', '-n', '7', '--sensor-range', '30'])
    config = particle_filter_node.load_parameters(args)
    assert config.resampler == 'selective'
    assert config.num_particles == 7
    assert config.sensor_range == pytest.approx(30.0)
    assert config.sigma_pos == [0.3, 0.3, 0.01]
    assert config.observation_noise
