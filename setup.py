from setuptools import setup
import os
from glob import glob

package_name = 'xarm_move'

setup(
    name=package_name,
    version='0.1.0',
    packages=[package_name],
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
        # Include config files in the install space
        (os.path.join('share', package_name, 'config'), glob('config/*.json')),
    ],
    install_requires=['setuptools', 'numpy', 'psutil'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    maintainer='Your Name',
    maintainer_email='you@example.com',
    description='MoveIt pose-goal client for xArm with RViz operator checkpoints',
    license='MIT',
    entry_points={
        'console_scripts': [
            'xarm_move_client = xarm_move.client:main',
        ],
    },
)
