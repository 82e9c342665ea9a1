# modis_reader/config/defaults.py
"""Default configuration values"""

import os

# Dataset selection and record production
READER = {
    'dataset_name': os.getenv('MODIS_DATASET_NAME', 'LST_Day_1km'),
    'skip_fill_value': True,
    'shape': 'point',  # point, rectangle
    'projector': None,  # identifier in the projector registry, e.g. 'mercator'
}

# Gap recovery ("recover holes")
GAP_RECOVERY = {
    'enabled': False,
    'water_mask_path': os.getenv('MODIS_WATER_MASK_PATH'),
    'water_mask_dataset': 'water_mask',
    'require_mask': False,  # skip recovery entirely when no mask is found
    'water_block_threshold': 0.5,  # share of water above which a gap is expected
}

LOGGING = {
    'level': os.getenv('MODIS_LOG_LEVEL', 'INFO'),
    'show_context': True,
}
