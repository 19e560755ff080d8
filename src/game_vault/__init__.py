"""GameVault - keep track of your video-game library from the terminal."""

__version__ = "0.1.0"
