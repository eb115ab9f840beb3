"""Shared test fixtures for anomaly scoring tests."""

import numpy as np
import cv2
import pytest


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]  # Red square
    return img


@pytest.fixture
def blue_circle_image():
    """Generate a 200x200 blue circle on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    cv2.circle(img, (100, 100), 60, (30, 30, 200), -1)
    return img


@pytest.fixture
def textured_image():
    """Generate a 200x200 checkerboard with strong edges."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 200
    for y in range(0, 200, 20):
        for x in range(0, 200, 20):
            if (x // 20 + y // 20) % 2 == 0:
                img[y:y+20, x:x+20] = [50, 50, 50]
    return img


@pytest.fixture
def uniform_image():
    """Generate a 64x64 flat gray image (no gradients)."""
    return np.full((64, 64, 3), 128, dtype=np.uint8)


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def png_bytes(red_square_image):
    """PNG-encoded bytes of the red square image."""
    ok, buf = cv2.imencode('.png', cv2.cvtColor(red_square_image, cv2.COLOR_RGB2BGR))
    assert ok
    return buf.tobytes()


@pytest.fixture
def image_dir(tmp_path, red_square_image, blue_circle_image, textured_image):
    """Directory with three valid PNGs, one corrupt JPEG, and a text file."""
    for name, img in [("a_red.png", red_square_image),
                      ("b_blue.png", blue_circle_image),
                      ("c_texture.png", textured_image)]:
        cv2.imwrite(str(tmp_path / name), cv2.cvtColor(img, cv2.COLOR_RGB2BGR))
    (tmp_path / "d_broken.jpg").write_bytes(b"not really a jpeg")
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path
