"""dlib backend for face extraction.

Components:
- DlibDetector: Face detection using HOG or CNN via face_recognition
- DlibEmbedder: 128-D face embeddings using ResNet-34
"""

from photo_finder.backends.dlib.detector import DlibDetector
from photo_finder.backends.dlib.embedder import DlibEmbedder

__all__ = [
    "DlibDetector",
    "DlibEmbedder",
]
