# imagerkit

Image analysis helpers built on NumPy, Pillow and SciPy. Requires Python
3.10 or later.

## Modules

- `imagerkit.colorformat`: `ensure_even_resolution` crops an image at the
  right and bottom to even dimensions; `to_nv12` and `to_yuv420p` convert an
  image to NV12 or planar YUV 4:2:0 (BT.601, limited range). `to_nv12`
  returns `(data, width, height)` and `to_yuv420p` returns
  `((y, u, v), width, height)`.
- `imagerkit.yuv`: `Yuv420P`, a frame held as one contiguous Y, U, V buffer,
  with `y()`, `u()`, `v()`, `dimensions()`, `save()` (writes the raw planes)
  and `to_rgba_image()`. Frames come from a Pillow image (`from_image`, even
  dimensions only), an image file (`open_image`) or a raw file
  (`open_yuv(path, width, height)`). `VideoBuffer` is an ordered sequence of
  frames read through a cursor (`next_frame`, `position`, `set_cursor`,
  `fresh_cursor`); `VideoBuffer.open_image_dir` loads every file whose name
  starts with a number, in numeric order. `open_dir_sorted_paths` lists those
  files.
- `imagerkit.classifier`: `get_report` measures edge density (`canny`) and
  region sizes on a 700x700 grayscale copy and sorts the image into one of the
  classes `L0`, `L1`, `L2`, `M1`, `H1`, `H2` (`classify_meta` does the
  sorting from a `Meta`). The `Report` also says whether the image has a white
  backdrop (`is_white_dominant`) and carries grayscale, edge and coloured
  region debug images. `Class.parse` reads a class name, ignoring case.
- `imagerkit.process`: `NoisyLayer.from_labels` marks the centre of every
  label, `DenseLayer.from_labels` marks labels covering more than four pixels,
  `GradientLayer.from_grayscale` holds Canny edges. `evaluate` resizes an
  image to 600x600 grayscale, and `run(input_dir, output_dir)` evaluates every
  `.jpeg` and `.png` under `input_dir` and saves PNGs to `output_dir`,
  returning the written paths.
- `imagerkit.palette`: `generate_palette` makes random, pastel or dark
  palettes (`PaletteType`); `random_color_map` and `to_pretty_rgb_palette`
  colour label images for inspection; `filter_rgb_regions`,
  `filter_luma_regions`, `remove_larger_regions` and `set_region` replace
  values by how often they repeat.
- `imagerkit.quant`: `compress` reduces an image to at most `num_colors`
  (1 to 256) colours and returns indexed PNG bytes; `reduce_palette` returns
  the reduced image as RGBA.
- `imagerkit.jpeg`: `encode` writes a progressive, entropy-optimised JPEG;
  a quality of 0 is treated as 1, above 100 as 100, and a negative quality
  raises `ValueError`.

## Examples

Convert an image to YUV 4:2:0 and inspect its planes:

```python
from PIL import Image
from imagerkit.yuv import Yuv420P

frame = Yuv420P.from_image(Image.open("photo.jpeg"))
print(frame.dimensions(), len(frame.y()), len(frame.u()), len(frame.v()))
frame.save("photo.yuv")
back = frame.to_rgba_image()
```

Walk through a directory of numbered frames (`1.png`, `2.png`, ...):

```python
from imagerkit.yuv import VideoBuffer

video = VideoBuffer.open_image_dir("frames")
while (frame := video.next_frame()) is not None:
    print(video.position(), frame.dimensions())
```

Classify an image:

```python
import random
from PIL import Image
from imagerkit.classifier import Class, get_report

report = get_report(Image.open("photo.jpeg"), random.Random(0))
print(report.class_, report.white_backdrop, report.meta)
print(Class.parse("H1"))
```

Reduce the palette of an image and encode a JPEG:

```python
from PIL import Image
from imagerkit.quant import reduce_palette
from imagerkit.jpeg import encode

image = Image.open("photo.jpeg")
reduced = reduce_palette(image, 64)
data = encode(image, 75)
```

Generate a colour palette:

```python
import random
from imagerkit.palette import PaletteType, generate_palette

palette = generate_palette(7, PaletteType.RANDOM, False, random.Random(1))
for color in palette.colors:
    print(color.to_array())
```

## What it does not do

imagerkit works on still images and raw YUV frames only. It does not decode
or encode compressed video streams (such as H.264), does not compute video
quality scores, and has no HTTP server or command-line program; `process.run`
is a plain function to call from Python.

## Tests

The test suite uses pytest and is installed with the `test` extra.