"""YUV 4:2:0 conversion, image classification, region layers, palettes, palette reduction and JPEG encoding."""

__version__ = "0.1.0"

__all__ = ["classifier", "colorformat", "jpeg", "palette", "process", "quant", "yuv"]