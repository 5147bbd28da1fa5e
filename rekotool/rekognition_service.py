"""
Amazon Rekognition Service
Thin wrapper over the boto3 Rekognition client for the calls the batch needs.
"""

from typing import Dict, List, NamedTuple, Optional, Set

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .byte_source import AdaptiveByteSource


# Fixed request options shared by every call of a run.
DETECTION_ATTRIBUTES = ("ALL", "DEFAULT")
MAX_FACES = 1
QUALITY_FILTER = "AUTO"
FACE_MATCH_THRESHOLD = 90.0

SUGGESTED_REGION_PREFIX = "eu-"


class FaceMatch(NamedTuple):
    """Best match returned by a collection search."""

    face_id: str
    similarity: float


def available_regions() -> List[str]:
    """Region names boto3 knows for the Rekognition service."""
    return boto3.session.Session().get_available_regions("rekognition")


def suggested_regions() -> List[str]:
    return [region for region in available_regions()
            if region.lower().startswith(SUGGESTED_REGION_PREFIX)]


def validate_region(region: str) -> str:
    """
    Check a region name against the known Rekognition regions.

    Raises:
        ValueError: If the region is unknown; the message lists suggestions
    """
    if region in available_regions():
        return region
    raise ValueError(
        f"Unknown region '{region}'. Try one of: {', '.join(suggested_regions())}"
    )


class RekognitionService:
    """
    Service for enrolling and searching faces in a Rekognition collection.

    What it does:
    - Builds a boto3 client from explicit credentials and a region
    - Makes sure a collection exists, creating it when it is missing
    - Indexes the face of one image into a collection
    - Searches a collection for the best match of the face in one image

    Calls are made once: the client is built with retries disabled, and
    every error other than a missing collection reaches the caller.
    """

    def __init__(self, access_key: str, secret_key: str, region: str,
                 config: Optional[Dict] = None, client=None):
        """
        Initialize the Rekognition client.

        Args:
            access_key: AWS access key id
            secret_key: AWS secret access key
            region: Region system name, e.g. eu-west-1
            config: Optional `rekognition` section of the config file
            client: Pre-built client, used instead of creating one
        """
        self.config = config or {}
        self._known_collections: Set[str] = set()

        if client is not None:
            self.client = client
            return

        client_config = Config(
            region_name=region,
            retries={"total_max_attempts": 1, "mode": "standard"},
            connect_timeout=self.config.get("connect_timeout", 60),
            read_timeout=self.config.get("read_timeout", 60),
            use_dualstack_endpoint=self.config.get("use_dualstack_endpoint", False),
        )
        self.client = boto3.client(
            "rekognition",
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            endpoint_url=self.config.get("endpoint_url"),
            config=client_config,
        )

    def ensure_collection(self, collection_id: str) -> bool:
        """
        Make sure a collection exists.

        The collection is looked up once per process; later calls for the
        same id return without touching the service.

        Args:
            collection_id: Collection to check

        Returns:
            True if the collection was created by this call, False otherwise
        """
        if collection_id in self._known_collections:
            return False

        created = False
        try:
            self.client.describe_collection(CollectionId=collection_id)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                raise
            self.client.create_collection(CollectionId=collection_id)
            created = True

        self._known_collections.add(collection_id)
        return created

    def index_face(self, collection_id: str, source: AdaptiveByteSource) -> Optional[str]:
        """
        Enroll the face found in an image.

        Args:
            collection_id: Collection to add the face to
            source: Image bytes

        Returns:
            The FaceId of the first face record, or None if no face was indexed
        """
        response = self.client.index_faces(
            CollectionId=collection_id,
            Image={"Bytes": source.readall()},
            DetectionAttributes=list(DETECTION_ATTRIBUTES),
            MaxFaces=MAX_FACES,
            QualityFilter=QUALITY_FILTER,
        )
        records = response.get("FaceRecords") or []
        if not records:
            return None
        return records[0]["Face"]["FaceId"]

    def search_face(self, collection_id: str, source: AdaptiveByteSource) -> Optional[FaceMatch]:
        """
        Search a collection for the face found in an image.

        Args:
            collection_id: Collection to search
            source: Image bytes

        Returns:
            The best FaceMatch at or above FACE_MATCH_THRESHOLD, or None
        """
        response = self.client.search_faces_by_image(
            CollectionId=collection_id,
            Image={"Bytes": source.readall()},
            FaceMatchThreshold=FACE_MATCH_THRESHOLD,
            QualityFilter=QUALITY_FILTER,
            MaxFaces=MAX_FACES,
        )
        matches = response.get("FaceMatches") or []
        if not matches:
            return None
        best = matches[0]
        return FaceMatch(best["Face"]["FaceId"], best["Similarity"])
