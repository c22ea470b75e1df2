import json

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def mass_image(tmp_path):
    """A 40x20 luma image: black with a white 10x6 block in the middle."""
    pixels = np.zeros((20, 40), dtype=np.uint8)
    pixels[7:13, 15:25] = 255
    path = tmp_path / "mass.png"
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "frames"
    path.mkdir()
    return path


@pytest.fixture
def config_dict(mass_image, output_dir):
    return {
        "mass_distr_file_path": str(mass_image),
        "output_directory_path": str(output_dir),
        "frames_number": 2,
        "simulation_factor": 1,
        "target_resolution": 480,
        "flow_field_scale": 60.0,
        "dynamize_flow_field": False,
        "randomize_flow_field": False,
    }


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="config.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
