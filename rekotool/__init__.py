"""
Rekognition Batch Tool Package

Batch-processes a folder of images against Amazon Rekognition:
1. Collect - enroll one face per image into a collection
2. Search - find the best collection match for each image

Results are streamed as CSV on standard output.
"""

from .byte_source import AdaptiveByteSource, StreamTooLargeError, TruncatedStreamError
from .file_enumerator import ImageFile, enumerate_files
from .csv_output import CsvEmitter
from .rekognition_service import RekognitionService, FaceMatch
from .batch import CollectRunner, SearchRunner

__version__ = "1.0.0"

__all__ = [
    "AdaptiveByteSource",
    "StreamTooLargeError",
    "TruncatedStreamError",
    "ImageFile",
    "enumerate_files",
    "CsvEmitter",
    "RekognitionService",
    "FaceMatch",
    "CollectRunner",
    "SearchRunner"
]
