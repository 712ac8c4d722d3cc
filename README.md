# dsolib

Small building blocks for direct visual odometry work, on top of NumPy and
Pillow: image containers, sub-pixel sampling, photometric correction, image
file handling and a k-d tree for nearest-neighbour queries.

## Modules

- `dsolib.minimal_image`
  - `MinimalImage(w, h, dtype=np.float32, channels=1, data=None)`: a `w` x `h`
    image whose `data` is an `(h, w)` or `(h, w, channels)` array. Pixel access
    with `at(x, y)`, filling with `set_black()` / `set_const(val)`, drawing with
    `set_pixel1`, `set_pixel4`, `set_pixel9`, `set_pixel_circ`, and `clone()`.
    Writes outside the image raise `IndexError`.
  - `ImageAndExposure(w, h, timestamp=0.0)`: a float32 irradiance image with
    `exposure_time` (default 1.0), `copy_meta_to(other)` and `deep_copy()`.
- `dsolib.interpolation`: bilinear and bicubic sampling of `(h, w)` and
  `(h, w, c)` arrays at column `x`, row `y`: `interpolated_element`,
  `interpolated_element_31`, `_33`, `_43`, `_44`, `_42`, the over-exposure
  variants `interpolated_element_33_over_and` / `_over_or` (returning the value
  and a flag), `interpolated_element_13_bilin` / `_33_bilin` (value with slopes),
  `interpolated_element_11_bicub`, `_13_bicub`, `_33_bicub`, and the 1-D cubic
  helpers `cubic_11`, `cubic_12`, `cubic_32`. Reads outside the image raise
  `IndexError`.
- `dsolib.colormap`: `make_rainbow_f3(value, scale=1.0)`,
  `make_rainbow_3b(value, scale=1.0)`, `make_jet_3b(value)` and
  `make_red_green_3b(value)` turn a scalar into a colour tuple.
- `dsolib.image_io`: `read_image_bw_8u`, `read_image_rgb_8u` (BGR channel
  order), `read_image_bw_16u`, `read_stream_bw_8u(data)` and
  `write_image(filename, img)`. Failed reads raise `ImageReadError`.
- `dsolib.image_stitch`: `best_grid(num_images, width, height, max_frames=0)`
  picks columns and rows close to a 16:10 layout; `stitch_images(images, cc=0,
  rc=0, max_frames=0)` tiles equally sized images into one array.
- `dsolib.photometric`: `PhotometricUndistorter(w, h, response=None,
  vignette=None)` with `process_frame(image, exposure_time, factor=1.0,
  mode=PhotometricMode.FULL, use_exposure=True)`, which maps raw integer pixel
  values through the inverse response table and divides out the vignette.
  Without a response table, with a non-positive exposure time or with
  `PhotometricMode.NONE` the frame is only scaled by `factor`.
- `dsolib.kdtree_results`: `KNNResultSet(capacity, first_match=False)` and
  `RadiusResultSet(radius)` collect search results.
- `dsolib.kdtree_metrics`: `Metric` (`L1`, `L2`, `L2_SIMPLE`), the distance
  classes `L1Distance`, `L2Distance`, `L2SimpleDistance` and `distance_for(metric)`.
- `dsolib.kdtree`: `KDTree(data, metric=Metric.L2, leaf_max_size=10, dim=None)`
  with `build_index()`, `find_neighbors(result, vec, eps=0.0)`,
  `knn_search(query, num_closest)`, `radius_search(query, radius, sort=True)`,
  `save_index(stream)` and `load_index(stream)`. L2 distances are squared.

## Installing

```
pip install .
pip install ".[test]"   # with pytest
```

## Examples

Bilinear sampling:

```python
import numpy as np
from dsolib.interpolation import interpolated_element

img = np.arange(16, dtype=np.float32).reshape(4, 4)
value = interpolated_element(img, 1.5, 2.25)
```

Photometric correction:

```python
import numpy as np
from dsolib.photometric import PhotometricUndistorter

undistorter = PhotometricUndistorter(4, 3, response=np.arange(256) * 0.5)
frame = np.full((3, 4), 100, dtype=np.uint8)
out = undistorter.process_frame(frame, exposure_time=10.0)
print(out.image[0, 0], out.exposure_time)   # 50.0 10.0
```

Nearest neighbours:

```python
import numpy as np
from dsolib.kdtree import KDTree

points = np.random.default_rng(0).random((100, 3))
tree = KDTree(points)
tree.build_index()
for index, squared_distance in tree.knn_search(points[0], 5):
    print(index, squared_distance)
```

## What it does not do

- No camera models or geometric undistortion: images are only corrected
  photometrically.
- No pose optimisation, Hessian accumulation or parallel work splitting.
- No windows or on-screen display: `stitch_images` returns an array, which
  can be saved with `write_image`.
- No command-line program; everything is used as a library.

## Running the tests

```
pytest
```