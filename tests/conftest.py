"""Shared test fixtures for color search tests."""

import shutil

import numpy as np
import cv2
import pytest


def write_image(path, rgb):
    """Write an RGB array to disk with OpenCV (which expects BGR)."""
    assert cv2.imwrite(str(path), np.ascontiguousarray(rgb[:, :, ::-1]))
    return path


def solid_image(color, size=(40, 40)):
    img = np.zeros((size[0], size[1], 3), dtype=np.uint8)
    img[:] = color
    return img


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]
    return img


@pytest.fixture
def blue_image():
    """Generate a 100x100 solid blue image."""
    return solid_image((20, 20, 220), size=(100, 100))


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 256, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def query_path(tmp_path, noise_image):
    """A noisy query image saved as lossless PNG outside the dataset."""
    return str(write_image(tmp_path / "query.png", noise_image))


@pytest.fixture
def dataset_dir(tmp_path, query_path):
    """
    Dataset with one exact copy of the query plus four unrelated images.

    The unrelated images are solid colors, so each shares at most one
    bucket with the query.
    """
    directory = tmp_path / "dataset"
    directory.mkdir()
    shutil.copyfile(query_path, directory / "match.png")
    write_image(directory / "red.png", solid_image((230, 10, 10)))
    write_image(directory / "green.png", solid_image((10, 230, 10)))
    write_image(directory / "blue.png", solid_image((10, 10, 230)))
    write_image(directory / "gray.bmp", solid_image((128, 128, 128)))
    return directory
