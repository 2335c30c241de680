[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imagerkit"
version = "0.1.0"
description = "Image analysis helpers: YUV 4:2:0 conversion, complexity classification, region layers, palette reduction and JPEG encoding."
requires-python = ">=3.10"
keywords = ["image", "yuv420p", "nv12", "classification", "palette", "quantization", "jpeg", "canny"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "pillow",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["imagerkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
