"""Story Recorder - record short audio stories in the browser and manage them."""

__version__ = "0.1.0"
