"""Game-engine building blocks: scenes, chunked data, PNG and WAV loading, audio mixing, fonts and cameras."""

__version__ = "0.1.0"