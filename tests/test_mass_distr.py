import numpy as np
import pytest
from PIL import Image

from massflow.errors import AssetError
from massflow.mass_distr import load_mass_distribution


def test_image_is_centered_and_normalized(mass_image):
    mass = load_mass_distribution(mass_image, 60, 30)

    assert mass.shape == (30, 60)
    assert mass.dtype == np.float32
    # 40x20 image → padding (10, 5); white block lands at rows 12:18, cols 25:35
    assert np.all(mass[12:18, 25:35] == 1.0)
    assert mass.sum() == pytest.approx(60.0)
    assert mass.max() == 1.0
    assert mass.min() == 0.0


def test_odd_padding_rounds_down_on_the_left(tmp_path):
    pixels = np.full((3, 3), 255, dtype=np.uint8)
    path = tmp_path / "dot.png"
    Image.fromarray(pixels).save(path)

    mass = load_mass_distribution(path, 6, 6)

    # (6 - 3) // 2 == 1 → columns/rows 1..3 filled
    expected = np.zeros((6, 6), dtype=np.float32)
    expected[1:4, 1:4] = 1.0
    assert np.array_equal(mass, expected)


def test_exact_fit_has_no_padding(tmp_path):
    pixels = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
    path = tmp_path / "fit.png"
    Image.fromarray(pixels).save(path)

    mass = load_mass_distribution(path, 4, 3)

    assert np.allclose(mass, pixels / 255.0)


def test_color_image_is_reduced_to_luma(tmp_path):
    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    pixels[..., 0] = 255    # pure red
    path = tmp_path / "red.png"
    Image.fromarray(pixels).save(path)

    mass = load_mass_distribution(path, 2, 2)

    # ITU-R 601-2 luma: 0.299 * 255
    assert mass[0, 0] == pytest.approx(0.299, abs=1.0 / 255.0)


@pytest.mark.parametrize("width,height", [(39, 20), (40, 19), (10, 10)])
def test_oversized_image_is_rejected(mass_image, width, height):
    with pytest.raises(AssetError, match="larger than the target resolution"):
        load_mass_distribution(mass_image, width, height)


def test_undecodable_file_raises_asset_error(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not a png")

    with pytest.raises(AssetError) as excinfo:
        load_mass_distribution(path, 10, 10)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_missing_file_raises_asset_error(tmp_path):
    with pytest.raises(AssetError):
        load_mass_distribution(tmp_path / "nope.png", 10, 10)
