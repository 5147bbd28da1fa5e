"""
Batch Runners
Drive one remote Rekognition call per image file and stream the CSV results.
"""

import sys
import time
from pathlib import Path
from typing import Dict, Optional, Sequence, TextIO, Tuple, Union

from tqdm import tqdm

from .byte_source import AdaptiveByteSource
from .csv_output import COLLECT_HEADER, SEARCH_HEADER, CsvEmitter
from .file_enumerator import ImageFile, enumerate_files


NOT_DETECTED = "NotDetected"
NO_MATCH_FACE_ID = "null"
NO_MATCH_SIMILARITY = 0


def format_similarity(similarity: float) -> str:
    """Similarity with six significant digits, e.g. 99.9984."""
    return f"{similarity:g}"


class BatchRunner:
    """
    Shared loop for the collect and search batches.

    What it does:
    - Enumerates the matching files of a directory
    - Opens each file as an AdaptiveByteSource that is closed right after its call
    - Hands the source to the mode-specific process() step
    - Writes exactly one CSV line per file, in enumeration order

    Files are handled one at a time. Any error from the service or from
    reading a file stops the batch; lines already written stay valid.
    """

    header: Sequence[str] = ()
    progress_label = "Processing images"

    def __init__(self, service, collection_id: str, output: Optional[TextIO] = None,
                 show_progress: Optional[bool] = None, status: Optional[TextIO] = None):
        """
        Args:
            service: RekognitionService (or anything with the same calls)
            collection_id: Target collection
            output: Stream for the CSV lines, stdout by default
            show_progress: True/False to force the progress bar, None for auto
            status: Stream for status messages, stderr by default
        """
        self.service = service
        self.collection_id = collection_id
        self.emitter = CsvEmitter(self.header, output)
        self.show_progress = show_progress
        self._status = status
        self.stats = {'files_processed': 0, 'faces_found': 0, 'no_result': 0}

    @property
    def status(self) -> TextIO:
        return self._status if self._status is not None else sys.stderr

    def prepare(self) -> None:
        """Hook run once before the first file."""

    def process(self, image: ImageFile, source: AdaptiveByteSource) -> Tuple:
        """Call the service for one file and return its CSV fields."""
        raise NotImplementedError

    def run(self, directory: Union[str, Path], pattern: str = "*.jpg",
            recurse: bool = False) -> Dict:
        """
        Run the batch over a directory.

        Args:
            directory: Directory holding the images
            pattern: Wildcard pattern for file names
            recurse: Also scan sub-directories

        Returns:
            Batch statistics
        """
        start_time = time.time()
        self.prepare()
        self.emitter.write_header()

        files = enumerate_files(directory, pattern, recurse)
        disable = None if self.show_progress is None else not self.show_progress
        for image in tqdm(files, desc=self.progress_label, unit="file",
                          disable=disable, file=self.status):
            with AdaptiveByteSource(open(image.path, 'rb'), leave_open=False) as source:
                fields = self.process(image, source)
            self.emitter.write_row(*fields)
            self.stats['files_processed'] += 1

        self.stats['execution_time'] = time.time() - start_time
        self.report()
        return self.stats

    def report(self) -> None:
        print(
            f"✓ {self.stats['files_processed']} file(s) processed in "
            f"{self.stats['execution_time']:.2f} seconds: "
            f"{self.stats['faces_found']} with a result, {self.stats['no_result']} without",
            file=self.status,
        )


class CollectRunner(BatchRunner):
    """Enrolls the face of every image into the collection."""

    header = COLLECT_HEADER
    progress_label = "Enrolling faces"

    def prepare(self) -> None:
        if self.service.ensure_collection(self.collection_id):
            print(f"✓ Created collection: {self.collection_id}", file=self.status)
        else:
            print(f"ℹ Using existing collection: {self.collection_id}", file=self.status)

    def process(self, image: ImageFile, source: AdaptiveByteSource) -> Tuple:
        face_id = self.service.index_face(self.collection_id, source)
        if face_id is None:
            self.stats['no_result'] += 1
            return image.name, NOT_DETECTED
        self.stats['faces_found'] += 1
        return image.name, face_id


class SearchRunner(BatchRunner):
    """
    Searches the collection for the best match of every image.

    The timer covers only the remote call: the file is already open when it
    starts, and response parsing is done when it stops.
    """

    header = SEARCH_HEADER
    progress_label = "Searching faces"

    def process(self, image: ImageFile, source: AdaptiveByteSource) -> Tuple:
        started = time.perf_counter()
        match = self.service.search_face(self.collection_id, source)
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        if match is None:
            self.stats['no_result'] += 1
            return image.name, image.size, elapsed_ms, NO_MATCH_FACE_ID, NO_MATCH_SIMILARITY
        self.stats['faces_found'] += 1
        return image.name, image.size, elapsed_ms, match.face_id, format_similarity(match.similarity)
